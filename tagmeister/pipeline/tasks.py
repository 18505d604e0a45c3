# -*- coding: utf-8 -*-
"""
CaptionTask - 背景執行緒

在 QThread 中執行 BatchController，並把進度、串流片段與結果轉成 Qt 信號。
圖片仍然逐張依序處理。
"""
import traceback
from typing import List, Optional

from PyQt6.QtCore import QThread, pyqtSignal

from tagmeister.core.dataclasses import BatchResult
from tagmeister.core.errors import CaptionError
from tagmeister.pipeline.batch import BatchController


class CaptionTask(QThread):
    """
    CaptionTask (Threaded)

    stop() 可從 UI 執行緒呼叫，只設定中止旗標。
    """

    # Signals
    progress = pyqtSignal(int, int, str)       # current, total, filename
    chunk = pyqtSignal(str, str)               # image_path, fragment
    image_done = pyqtSignal(str, str)          # image_path, caption
    batch_done = pyqtSignal(object)            # BatchResult
    error = pyqtSignal(str)                    # error message

    def __init__(self,
                 controller: BatchController,
                 paths: List[str],
                 model: Optional[str] = None,
                 prompt_style=None,
                 parent=None):
        super().__init__(parent)
        self.controller = controller
        self.paths = list(paths)
        self.model = model
        self.prompt_style = prompt_style
        self.result: Optional[BatchResult] = None

        controller.on_progress = self._emit_progress
        controller.on_chunk = self.chunk.emit
        controller.on_image_done = self.image_done.emit
        controller.notify = self.error.emit

    @property
    def name(self) -> str:
        return "caption"

    def stop(self):
        """Request stop"""
        self.controller.stop()

    def _emit_progress(self, current: int, total: int, path: str):
        self.progress.emit(current, total, path)

    def run(self):
        """
        Main execution loop (Runs in background thread)
        """
        try:
            self.result = self.controller.start(
                self.paths,
                model=self.model,
                prompt_style=self.prompt_style,
            )
            self.batch_done.emit(self.result)
        except CaptionError as e:
            # 開始前的檢查 (沒有選取 / 缺少設定)
            print(f"[CaptionTask] 無法開始: {e}")
            self.error.emit(str(e))
        except Exception as e:
            traceback.print_exc()
            self.error.emit(str(e))
