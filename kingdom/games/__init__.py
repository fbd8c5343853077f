"""
Games module - Card sets and setup rules.

Each game has its own subpackage with:
- Card definitions as effect scripts
- Setup (Supply sizes, starting decks)
"""
