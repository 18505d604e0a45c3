# -*- coding: utf-8 -*-
"""
Pipeline Manager

管理 caption 批次的執行，提供 UI 整合介面。
"""
from typing import Callable, Dict, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from tagmeister.core.dataclasses import BatchResult, CaptionStore, ImageFile, Settings
from tagmeister.core.settings import save_app_settings
from tagmeister.pipeline.batch import BatchController
from tagmeister.pipeline.selection import SelectionModel
from tagmeister.pipeline.tasks import CaptionTask
from tagmeister.utils.file_ops import list_image_files, load_captions
from tagmeister.utils.sidecar import save_caption, save_captions
from tagmeister.workers.registry import ProviderRouter


class PipelineManager(QObject):
    """
    Pipeline 管理器

    持有設定、ProviderRouter、選取狀態與 CaptionStore，
    並把 CaptionTask 的信號轉發給 UI。
    """

    # 信號（轉發給 UI）
    progress = pyqtSignal(int, int, str)          # 進度
    chunk = pyqtSignal(str, str)                  # 串流片段
    image_done = pyqtSignal(str, str)             # 單圖完成
    batch_done = pyqtSignal(object)               # BatchResult
    error = pyqtSignal(str)                        # 錯誤
    directory_loaded = pyqtSignal(object)         # List[ImageFile]

    def __init__(self,
                 settings: Optional[Settings] = None,
                 router: Optional[ProviderRouter] = None,
                 settings_path: Optional[str] = None,
                 parent=None):
        super().__init__(parent)
        self.settings = settings or Settings()
        self.settings_path = settings_path
        self.router = router or ProviderRouter(self.settings)
        self.selection = SelectionModel()
        self.captions = CaptionStore()
        self.images: List[ImageFile] = []
        self._current_task: Optional[CaptionTask] = None

    def is_running(self) -> bool:
        """是否有批次正在執行"""
        return self._current_task is not None and self._current_task.isRunning()

    def stop(self):
        """中止當前批次"""
        if self._current_task:
            self._current_task.stop()

    # ============================================================
    # 資料夾 / Provider
    # ============================================================

    def load_directory(self, dir_path: str) -> List[ImageFile]:
        """載入資料夾內的圖片與既有 caption，預設選取第一張"""
        try:
            images = list_image_files(dir_path)
        except OSError as e:
            self.error.emit(f"Error: {e}")
            return []

        self.images = images
        self.captions.clear()
        for path, caption in load_captions(images).items():
            self.captions.set(path, caption)
        self.selection.load([img.path for img in images])

        self.settings.last_open_dir = dir_path
        self._save_settings()
        print(f"[Pipeline] 載入 {dir_path}: {len(images)} 張圖片")
        self.directory_loaded.emit(images)
        return images

    def refresh_local_providers(self) -> Dict:
        """重新檢查本機伺服器並取得模型列表"""
        return self.router.refresh_local_providers()

    # ============================================================
    # Caption
    # ============================================================

    def run_captioning(self,
                       paths: Optional[List[str]] = None,
                       confirm: Optional[Callable[[int], bool]] = None) -> bool:
        """
        對 paths (預設為目前選取) 執行批次。

        多張圖片時先呼叫 confirm(count)，回傳 False 則不執行。
        """
        if self.is_running():
            self.error.emit("已有批次正在執行")
            return False

        paths = list(paths) if paths is not None else self.selection.selected_paths()
        if len(paths) > 1 and confirm is not None and not confirm(len(paths)):
            return False

        controller = BatchController(
            self.router,
            captions=self.captions,
            selection=self.selection,
            settings=self.settings,
        )
        task = CaptionTask(controller, paths, parent=self)
        self._current_task = task

        # 連接信號
        task.progress.connect(self.progress.emit)
        task.chunk.connect(self.chunk.emit)
        task.image_done.connect(self.image_done.emit)
        task.batch_done.connect(self._on_done)
        task.error.connect(self.error.emit)
        task.finished.connect(self._on_finished)

        # 啟動
        task.start()
        return True

    def update_caption(self, path: str, caption: str):
        """使用者編輯"""
        self.captions.set(path, caption)

    def save_caption(self, path: str) -> bool:
        return save_caption(path, self.captions.get(path))

    def save_all_captions(self) -> int:
        return save_captions(self.captions.as_dict())

    # ============================================================
    # 內部方法
    # ============================================================

    def _on_done(self, result: BatchResult):
        self.batch_done.emit(result)

    def _on_finished(self):
        self._current_task = None

    def _save_settings(self):
        save_app_settings(self.settings.to_dict(), self.settings_path)
