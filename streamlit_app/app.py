#!/usr/bin/env python3
"""Streamlit app for human players to assemble tile puzzles."""

import asyncio
import sys
from pathlib import Path

import streamlit as st

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tile_puzzle.catalog import ArchiveFetcher, JsonCatalog, PuzzleDescriptor, filter_by_difficulty
from tile_puzzle.config import GameConfig
from tile_puzzle.errors import PuzzleError
from tile_puzzle.metrics import format_elapsed
from tile_puzzle.renderer import BoardRenderer
from tile_puzzle.session import PuzzleSession, SessionState
from tile_puzzle.storage import JsonFileStore, PlayerProfile

# Page config
st.set_page_config(
    page_title="Puzzle Challenge",
    page_icon="🧩",
    layout="wide",
)

PROJECT_ROOT = Path(__file__).parent.parent
DIFFICULTIES = ["easy", "medium", "hard", "extra", "custom"]


def get_config() -> GameConfig:
    config = GameConfig.from_env()
    if config.store_path is None:
        config.store_path = str(PROJECT_ROOT / ".tile_puzzle" / "store.json")
    return config


def initialize_session_state():
    """Initialize session state variables."""
    if "config" not in st.session_state:
        st.session_state.config = get_config()
    if "store" not in st.session_state:
        st.session_state.store = JsonFileStore(st.session_state.config.store_path)
    if "profile" not in st.session_state:
        st.session_state.profile = PlayerProfile(st.session_state.store)
    if "game" not in st.session_state:
        st.session_state.game = None
    if "renderer" not in st.session_state:
        st.session_state.renderer = BoardRenderer(cell_size=96, theme=st.session_state.profile.theme)
    if "last_message" not in st.session_state:
        st.session_state.last_message = None
    if "just_solved" not in st.session_state:
        st.session_state.just_solved = None


def new_game(player_name: str) -> PuzzleSession:
    """Create a session for the current player, keeping the placement mode."""
    config = GameConfig.from_dict(st.session_state.config.to_dict())
    config.player_name = player_name
    previous = st.session_state.game
    game = PuzzleSession(config, store=st.session_state.store)
    if previous is not None:
        game.set_mode(previous.mode)
    return game


def load_blob(blob: bytes, archive_name: str, player_name: str, puzzle: PuzzleDescriptor | None = None) -> None:
    """Load an archive into a fresh session and report the outcome."""
    game = new_game(player_name)
    try:
        report = asyncio.run(game.load_archive_async(blob, archive_name, puzzle))
    except PuzzleError as e:
        st.session_state.last_message = f"⚠️ {e}"
        return
    if report is None:
        return
    st.session_state.game = game
    st.session_state.renderer = BoardRenderer(cell_size=96, theme=st.session_state.profile.theme)
    st.session_state.just_solved = None
    st.session_state.last_message = f"✅ {report.message()}"


THEME_CSS = {
    "dark": """
<style>
.stApp, [data-testid="stSidebar"] { background-color: #0e1117; color: #fafafa; }
.stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label { color: #fafafa; }
</style>
""",
    "light": """
<style>
.stApp, [data-testid="stSidebar"] { background-color: #ffffff; color: #31333f; }
.stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label { color: #31333f; }
</style>
""",
}


def apply_theme(theme: str):
    """Restyle the page and board images for the player's theme."""
    st.markdown(THEME_CSS[theme], unsafe_allow_html=True)
    renderer: BoardRenderer = st.session_state.renderer
    if renderer.theme != theme:
        st.session_state.renderer = BoardRenderer(cell_size=renderer.cell_size, theme=theme)


def show_message():
    message = st.session_state.last_message
    if not message:
        return
    if message.startswith("⚠️"):
        st.warning(message)
    elif message.startswith("✅") or message.startswith("🎉"):
        st.success(message)
    else:
        st.info(message)


def run_action(action, success_message: str | None = None):
    """Run a session action, turning puzzle errors into a message."""
    try:
        result = action()
    except PuzzleError as e:
        st.session_state.last_message = f"⚠️ {e}"
        return None
    if success_message:
        st.session_state.last_message = success_message
    return result


def render_leaderboard(game: PuzzleSession):
    entries = game.leaderboard.top(game.puzzle.id if game.puzzle else None, game.rows, game.cols)
    if not entries:
        st.markdown("_No entries yet._")
        return
    st.table(
        [
            {"#": i, "Player": e.player_name, "Time": format_elapsed(e.elapsed_ms)}
            for i, e in enumerate(entries, 1)
        ]
    )


def sidebar(profile: PlayerProfile):
    config = st.session_state.config
    with st.sidebar:
        st.header("🧩 Puzzle Challenge")

        name = st.text_input("Your name", value=profile.name)
        if name.strip() and name.strip() != profile.name:
            profile.name = name
            st.session_state.game = None

        dark = st.toggle("Dark mode", value=profile.theme == "dark")
        profile.theme = "dark" if dark else "light"

        difficulty = st.selectbox("Difficulty", DIFFICULTIES, index=0)

        st.divider()

        puzzles = filter_by_difficulty(JsonCatalog(config.catalog_path).list_puzzles(), difficulty)
        if puzzles:
            labels = {f"{p.name} ({p.rows}×{p.cols})" if p.bounds else p.name: p for p in puzzles}
            choice = st.selectbox("Puzzle", list(labels))
            if st.button("Load puzzle", type="primary", use_container_width=True):
                puzzle = labels[choice]
                fetcher = ArchiveFetcher(root=config.archive_root, timeout=config.fetch_timeout)
                try:
                    blob = fetcher.fetch(puzzle.archive_path)
                except PuzzleError as e:
                    st.session_state.last_message = f"⚠️ {e}"
                else:
                    load_blob(blob, puzzle.archive_name, profile.name, puzzle)
                st.rerun()
        else:
            st.info("No puzzles found.")

        if difficulty == "custom":
            uploaded = st.file_uploader("Upload a ZIP of tiles", type=["zip"])
            if uploaded is not None and st.button("Load upload", use_container_width=True):
                load_blob(uploaded.getvalue(), uploaded.name, profile.name)
                st.rerun()
        else:
            st.caption("Upload is only available in Custom mode.")


def controls(game: PuzzleSession):
    st.subheader("Controls")
    col_rows, col_cols, col_mode = st.columns(3)
    with col_rows:
        rows = st.number_input("Rows", min_value=1, max_value=50, value=max(1, game.rows))
    with col_cols:
        cols = st.number_input("Cols", min_value=1, max_value=50, value=max(1, game.cols))
    with col_mode:
        assisted = st.checkbox("Assisted mode", value=game.mode == "assisted")
        game.set_mode("assisted" if assisted else "free")

    buttons = st.columns(6)
    if buttons[0].button("Build/Resize", use_container_width=True):
        run_action(lambda: game.build(int(rows), int(cols)), f"Built {int(rows)}×{int(cols)} grid.")
        st.session_state.just_solved = None
        st.rerun()
    if buttons[1].button("Check", use_container_width=True):
        result = run_action(game.check)
        if result is not None:
            prefix = "🎉 " if result.solved else ""
            st.session_state.last_message = prefix + result.message()
            if result.solved and result.rank is not None:
                st.session_state.just_solved = result
        st.rerun()
    if buttons[2].button("Clear", use_container_width=True):
        run_action(game.clear, "Board cleared.")
        st.session_state.just_solved = None
        st.rerun()
    if buttons[3].button("Shuffle", use_container_width=True):
        run_action(game.shuffle_palette)
        st.rerun()
    if buttons[4].button(f"Auto-solve (−{game.config.auto_solve_cost})", use_container_width=True):
        run_action(game.auto_solve, f"Auto-solved (−{game.config.auto_solve_cost} points).")
        st.rerun()
    if buttons[5].button("Reset", use_container_width=True):
        run_action(game.reset, "Reset.")
        st.session_state.just_solved = None
        st.rerun()
    st.caption("Assisted mode blocks incorrect drops and shows ✓/✗ feedback. Unassisted lets you place freely.")


def palette_panel(game: PuzzleSession):
    renderer: BoardRenderer = st.session_state.renderer
    palette = game.palette
    st.subheader(f"Tile Palette ({len(palette)})")
    if not palette:
        st.caption("All tiles placed.")
        return

    per_row = 6
    for start in range(0, len(palette), per_row):
        cells = st.columns(per_row)
        for slot, tile_id in zip(cells, palette[start:start + per_row]):
            tile = game.tile(tile_id)
            with slot:
                st.image(renderer.thumbnail(tile, size=64))
                selected = game.board.selected == tile_id
                if st.button("✔ Selected" if selected else "Select", key=f"sel_{tile_id}"):
                    game.select(None if selected else tile_id)
                    st.rerun()
    st.caption("Tip: select a tile, then click a grid cell to place it.")


def grid_panel(game: PuzzleSession):
    renderer: BoardRenderer = st.session_state.renderer
    st.subheader("Grid")
    st.image(renderer.render(game.board), use_container_width=True)

    if game.board.selected is None:
        return
    st.markdown("Place selected tile:")
    for r in range(game.rows):
        cells = st.columns(game.cols)
        for c, slot in enumerate(cells):
            if slot.button(f"{r},{c}", key=f"cell_{r}_{c}", use_container_width=True):
                run_action(lambda: game.place_selected(r, c))
                st.rerun()


def main():
    """Main app entry point."""
    initialize_session_state()
    profile: PlayerProfile = st.session_state.profile

    sidebar(profile)
    apply_theme(profile.theme)

    game: PuzzleSession | None = st.session_state.game
    if game is None:
        game = new_game(profile.name)
        st.session_state.game = game

    stats = st.columns(4)
    stats[0].metric("Player", profile.name)
    stats[1].metric("Points", game.points)
    stats[2].metric("Time", format_elapsed(game.elapsed_ms))
    stats[3].metric("Grid", f"{game.rows}×{game.cols}")

    show_message()

    if game.state == SessionState.UNLOADED:
        st.info("👈 Pick a puzzle (or upload a ZIP in Custom mode) to begin!")
        return

    controls(game)
    st.divider()

    col_grid, col_palette = st.columns([3, 2])
    with col_grid:
        grid_panel(game)
    with col_palette:
        palette_panel(game)

    solved = st.session_state.just_solved
    if solved is not None:
        st.divider()
        name = game.puzzle.name if game.puzzle else "Custom"
        st.subheader(f"Leaderboard: {name} ({game.rows}×{game.cols})")
        st.markdown(
            f"Your time: **{format_elapsed(solved.elapsed_ms)}** · "
            f"Rank **{solved.rank}** of {solved.leaderboard_total}"
        )
        render_leaderboard(game)
        st.balloons()


if __name__ == "__main__":
    main()
