# -*- coding: utf-8 -*-
"""
Tagmeister - 命令列入口

對資料夾內所有圖片 (jpg / jpeg / png) 生成 caption，寫入同名 .txt。

用法:
    python caption.py DIR [--model gpt-4o-mini] [--style booru] [--prefix ...] [--suffix ...]
"""
import sys
import argparse

from tagmeister.core.dataclasses import BatchState, PromptStyle
from tagmeister.core.errors import CaptionError
from tagmeister.core.settings import load_settings
from tagmeister.pipeline.batch import BatchController
from tagmeister.pipeline.selection import SelectionModel
from tagmeister.utils.file_ops import list_image_files
from tagmeister.workers.registry import ProviderRouter


STYLE_CHOICES = {
    "natural": PromptStyle.NATURAL_LANGUAGE,
    "booru": PromptStyle.BOORU_TAGS,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate captions for every image in a directory")
    parser.add_argument("directory", type=str, help="Directory containing images")
    parser.add_argument("--model", type=str, default=None,
                        help="Model identifier (gpt-4o-mini, claude-..., lmstudio:<id>, ollama:<id>)")
    parser.add_argument("--style", choices=sorted(STYLE_CHOICES), default=None, help="Prompt style")
    parser.add_argument("--prefix", type=str, default=None, help="Text prepended to every caption")
    parser.add_argument("--suffix", type=str, default=None, help="Text appended to every caption")
    parser.add_argument("--settings", type=str, default=None, help="Path to app_settings.json")
    parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    parser.add_argument("--no-stream", action="store_true", help="Print captions only when finished")
    return parser


def confirm(count: int) -> bool:
    answer = input(f"Generate captions for {count} images? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings)

    try:
        images = list_image_files(args.directory)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    paths = [img.path for img in images]
    if len(paths) > 1 and not args.yes and not confirm(len(paths)):
        print("Cancelled.")
        return 1

    selection = SelectionModel(paths)
    selection.select_all()
    controller = BatchController(ProviderRouter(settings), selection=selection, settings=settings)
    controller.stream = not args.no_stream
    controller.notify = lambda message: print(message, file=sys.stderr)
    controller.on_progress = lambda current, total, path: print(f"\n[{current}/{total}] {path}")
    if controller.stream:
        controller.on_chunk = lambda path, fragment: print(fragment, end="", flush=True)
    controller.on_image_done = lambda path, caption: print(f"\n=> {caption}")

    try:
        result = controller.start(
            paths,
            model=args.model,
            prompt_style=STYLE_CHOICES.get(args.style),
            prefix=args.prefix,
            suffix=args.suffix,
        )
    except CaptionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130

    print(f"\n{result.processed_count}/{result.total} captions written.")
    return 1 if result.state == BatchState.FAILED else 0


if __name__ == "__main__":
    sys.exit(main())
