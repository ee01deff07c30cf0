"""Folder sources: where folders and their item titles come from."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Union

from ._types import FolderSource

BookmarkNode = dict[str, Any]


class StaticFolderSource:
    """A fixed, in-memory list of folders."""

    def __init__(self, folders: Iterable[FolderSource] = ()) -> None:
        self._folders = tuple(folders)

    def list_folders(self) -> list[FolderSource]:
        return list(self._folders)


def _walk(nodes: Iterable[BookmarkNode]) -> Iterator[FolderSource]:
    """Pre-order walk; every node with children is a folder.

    A folder's items are the titles of its direct children that carry a
    ``url``. Sub-folders are folders of their own, not items.
    """
    for node in nodes:
        children = node.get("children") or []
        if not children:
            continue
        titles = tuple(
            child.get("title", child.get("name", "")) or ""
            for child in children if child.get("url")
        )
        yield FolderSource(
            folder_id=str(node.get("id", "")),
            name=node.get("title", node.get("name", "")) or "",
            items=titles,
        )
        yield from _walk(children)


class BookmarkTreeSource:
    """Folders from a nested bookmark tree.

    Accepts the tree itself (a node or a list of nodes, as returned by a
    browser bookmarks API) or the path of a Chromium ``Bookmarks`` JSON
    file, whose ``roots`` hold the top-level folders. A path is re-read on
    every ``list_folders`` call so each rebuild sees current contents.
    """

    def __init__(self, tree: Union[Path, str, BookmarkNode, list[BookmarkNode]]) -> None:
        self._tree = tree

    def _load(self) -> list[BookmarkNode]:
        tree: Any = self._tree
        if isinstance(tree, (str, Path)):
            with open(Path(tree).expanduser(), encoding="utf-8") as f:
                tree = json.load(f)
        if isinstance(tree, dict) and "roots" in tree:
            return [r for r in tree["roots"].values() if isinstance(r, dict)]
        if isinstance(tree, dict):
            return [tree]
        return list(tree)

    def list_folders(self) -> list[FolderSource]:
        return list(_walk(self._load()))
