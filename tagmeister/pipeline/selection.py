# -*- coding: utf-8 -*-
"""
多選模型

維護資料夾圖片的順序、已選取集合、主要選取 (primary) 與範圍選取的錨點。
primary 永遠是 None 或 selected 的成員。
"""
from typing import Dict, Iterable, List, Optional, Set


class SelectionModel:
    """
    圖片選取狀態

    ordered_paths 為資料夾列表順序，範圍選取依此計算。
    selected 以 dict 保留加入順序，toggle 移除時 primary 改為最後加入的成員。
    """

    def __init__(self, paths: Iterable[str] = ()):
        self.ordered_paths: List[str] = []
        self._index: Dict[str, int] = {}
        self._selected: Dict[str, None] = {}
        self.primary: Optional[str] = None
        self.last_anchor: Optional[str] = None
        self.load(paths, select_first=False)

    # ============================================================
    # 狀態
    # ============================================================

    @property
    def selected(self) -> Set[str]:
        return set(self._selected)

    def selected_paths(self) -> List[str]:
        """已選取的路徑 (依列表順序)"""
        return [p for p in self.ordered_paths if p in self._selected]

    def is_selected(self, path: str) -> bool:
        return path in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def load(self, paths: Iterable[str], select_first: bool = True):
        """載入新的資料夾列表，預設選取第一張"""
        self.ordered_paths = list(paths)
        self._index = {p: i for i, p in enumerate(self.ordered_paths)}
        self.clear()
        if select_first and self.ordered_paths:
            self.select_one(self.ordered_paths[0])

    def clear(self):
        self._selected = {}
        self.primary = None
        self.last_anchor = None

    # ============================================================
    # 選取操作
    # ============================================================

    def select_one(self, path: str):
        """單選"""
        self._require_known(path)
        self._selected = {path: None}
        self.primary = path
        self.last_anchor = path

    def toggle(self, path: str):
        """Ctrl+點擊：加入或移除"""
        self._require_known(path)
        if path in self._selected:
            del self._selected[path]
            self.primary = next(reversed(self._selected), None) if self._selected else None
        else:
            self._selected[path] = None
            self.primary = path
        self.last_anchor = path

    def select_range(self, path: str, additive: bool = False) -> bool:
        """
        Shift+點擊：選取錨點到 path 之間 (含兩端)。

        additive=True 時與現有選取聯集 (Ctrl+Shift)。
        沒有錨點時不做任何事並回傳 False；錨點不變。
        """
        self._require_known(path)
        if self.last_anchor is None or self.last_anchor not in self._index:
            return False
        start, end = sorted((self._index[self.last_anchor], self._index[path]))
        selected = dict(self._selected) if additive else {}
        for p in self.ordered_paths[start:end + 1]:
            selected[p] = None
        self._selected = selected
        self.primary = path
        return True

    def select_all(self):
        """全選，primary 為第一張"""
        self._selected = {p: None for p in self.ordered_paths}
        self.primary = self.ordered_paths[0] if self.ordered_paths else None

    def handle_click(self, path: str, ctrl: bool = False, shift: bool = False):
        """依修飾鍵分派到對應操作"""
        if shift:
            self.select_range(path, additive=ctrl)
        elif ctrl:
            self.toggle(path)
        else:
            self.select_one(path)

    def set_primary(self, path: str):
        """把已選取的 path 設為 primary"""
        if path in self._selected:
            self.primary = path

    def discard(self, paths: Iterable[str], reset_primary: bool = False):
        """
        從選取中移除 paths。
        primary 被移除 (或 reset_primary=True) 時改為剩下的第一張 (依列表順序)。
        """
        for p in paths:
            self._selected.pop(p, None)
        if reset_primary or self.primary not in self._selected:
            remaining = self.selected_paths()
            self.primary = remaining[0] if remaining else None

    def _require_known(self, path: str):
        if path not in self._index:
            raise KeyError(f"Unknown image path: {path}")
