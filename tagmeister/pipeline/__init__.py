# -*- coding: utf-8 -*-
"""
Tagmeister - Pipeline 模組

SelectionModel → BatchController → Provider
Qt 相關 (CaptionTask / PipelineManager) 請從 tagmeister.pipeline.tasks / manager 匯入。
"""
from tagmeister.pipeline.selection import SelectionModel
from tagmeister.pipeline.batch import BatchController

__all__ = [
    "SelectionModel",
    "BatchController",
]
