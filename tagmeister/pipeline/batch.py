# -*- coding: utf-8 -*-
"""
BatchController

依序對選取的圖片生成 caption：
IDLE → RUNNING → (COMPLETED | INTERRUPTED | FAILED)

- 一次只處理一張，中止只在圖片之間檢查
- 任何一張失敗就停止整批 (fail fast)，並只產生一則錯誤訊息
"""
from typing import Callable, Iterable, List, Optional

from tagmeister.core.dataclasses import (
    BatchResult,
    BatchState,
    CaptionStore,
    ProcessingState,
    PromptStyle,
    Settings,
)
from tagmeister.core.errors import NoSelectionError, format_error_message
from tagmeister.pipeline.selection import SelectionModel
from tagmeister.utils.parsing import process_caption
from tagmeister.utils.sidecar import save_caption
from tagmeister.workers.registry import ProviderRouter


def _print_notice(message: str):
    print(f"[Batch] {message}")


class BatchController:
    """
    批次 caption 控制器

    Hooks (皆為選用，在執行 start 的執行緒呼叫):
        on_progress(current, total, path): 每張圖開始時
        on_chunk(path, fragment): 串流片段
        on_image_done(path, caption): 每張圖完成並寫檔後
        notify(message): 失敗時的唯一一則使用者訊息
    """

    def __init__(self,
                 router: ProviderRouter,
                 captions: Optional[CaptionStore] = None,
                 selection: Optional[SelectionModel] = None,
                 settings: Optional[Settings] = None,
                 persist: Callable[[str, str], bool] = save_caption,
                 notify: Optional[Callable[[str], None]] = None):
        self.router = router
        self.captions = captions if captions is not None else CaptionStore()
        self.selection = selection
        self.settings = settings or router.settings
        self.persist = persist
        self.notify = notify or _print_notice

        self.state = BatchState.IDLE
        self.processing = ProcessingState()
        self.current_path: Optional[str] = None
        self.stream = True

        self.on_progress: Optional[Callable[[int, int, str], None]] = None
        self.on_chunk: Optional[Callable[[str, str], None]] = None
        self.on_image_done: Optional[Callable[[str, str], None]] = None

    @property
    def is_running(self) -> bool:
        return self.state == BatchState.RUNNING

    def stop(self):
        """請求中止，下一張圖開始前生效"""
        self.processing.interrupt_requested = True

    def start(self,
              paths: Iterable[str],
              model: Optional[str] = None,
              prompt_style=None,
              prefix: Optional[str] = None,
              suffix: Optional[str] = None) -> BatchResult:
        """
        執行批次 (同步，直到結束才返回)

        Args:
            paths: 依序處理的圖片路徑
            model / prompt_style / prefix / suffix: 未指定時使用 settings

        Raises:
            NoSelectionError: paths 為空
            ConfigurationError: Provider 缺少 API Key 或本機伺服器不可用
        """
        paths = list(paths)
        if not paths:
            raise NoSelectionError("No images selected.")

        model = model or self.settings.selected_model
        style = PromptStyle.from_value(prompt_style if prompt_style is not None else self.settings.prompt_style)
        prefix = self.settings.prefix_text if prefix is None else prefix
        suffix = self.settings.suffix_text if suffix is None else suffix

        provider, model_id = self.router.route(model)
        self.router.ensure_ready(provider)

        self.state = BatchState.RUNNING
        self.processing.begin(len(paths))
        processed: List[str] = []
        print(f"[Batch] 開始: {len(paths)} 張, model={model} ({provider.display_name})")

        try:
            for path in paths:
                if self.processing.interrupt_requested:
                    self.state = BatchState.INTERRUPTED
                    print(f"[Batch] 已中止 ({len(processed)}/{len(paths)})")
                    break

                try:
                    self._caption_one(provider, model_id, style, prefix, suffix,
                                      path, len(processed) + 1, len(paths))
                except Exception as e:
                    return self._fail(e, path, processed, provider.display_name)
                processed.append(path)
            else:
                self.state = BatchState.COMPLETED
                print(f"[Batch] 完成 ({len(processed)}/{len(paths)})")

            return BatchResult(
                state=self.state,
                processed_count=self.processing.processed_count,
                total=len(paths),
                processed_paths=processed,
            )
        finally:
            self.processing.finish()
            self.current_path = None

    # ============================================================
    # 內部方法
    # ============================================================

    def _caption_one(self, provider, model_id: str, style, prefix: str, suffix: str,
                     path: str, current: int, total: int):
        """單張圖片：生成 → 整理 → 存檔 → 通知"""
        self._begin_image(path, current, total)
        raw = provider.generate_caption(
            path, model_id, style,
            on_chunk=self._chunk_sink(path) if self.stream else None,
        )
        caption = process_caption(raw, provider.punctuation_mode, prefix, suffix)
        self.captions.set(path, caption)
        self.persist(path, caption)
        self.processing.processed_count += 1
        if self.on_image_done:
            self.on_image_done(path, caption)

    def _begin_image(self, path: str, current: int, total: int):
        self.current_path = path
        if self.selection is not None:
            self.selection.set_primary(path)
        # 重新生成前清空舊的 caption，串流片段接在後面
        self.captions.set(path, "")
        if self.on_progress:
            self.on_progress(current, total, path)

    def _chunk_sink(self, path: str) -> Callable[[str], None]:
        def sink(fragment: str):
            self.captions.append(path, fragment)
            if self.on_chunk:
                self.on_chunk(path, fragment)
        return sink

    def _fail(self, error: Exception, path: str, processed: List[str], provider_name: str) -> BatchResult:
        self.state = BatchState.FAILED
        print(f"[Batch] 失敗於 {path}: {error}")

        # 保留尚未處理的圖片，失敗的那張也移除
        if self.selection is not None:
            self.selection.discard(processed + [path], reset_primary=True)

        message = format_error_message(error, provider_name)
        self.notify(message)
        return BatchResult(
            state=self.state,
            processed_count=self.processing.processed_count,
            total=self.processing.total,
            processed_paths=list(processed),
            error=error,
            error_message=message,
        )
