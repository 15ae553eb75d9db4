from .models import SteamShortcut, shortcuts_to_tree, tree_to_shortcuts, SHORTCUTS_KEY
from .file import (
    read_shortcuts, write_shortcuts, read_shortcuts_text, write_shortcuts_text,
    load_binary_tree, load_text_tree, save_binary_tree, save_text_tree,
)
