import argparse
import logging

from rich.console import Console
from rich.progress import Progress, BarColumn, TextColumn
from rich.table import Table

from kanatype.audio import AudioManager
from kanatype.kana_data import KANA_SETS, kana_grid, COL_LABELS
from kanatype.kana_drill import KanaDrill, ROUND_COUNT
from kanatype.settings import load_settings

console = Console()


def show_grid(sets):
    """五十音図を表示する"""
    table = Table(title="五十音図")
    table.add_column("")
    for label in COL_LABELS:
        table.add_column(label, justify="center")
    for row_label, cells in kana_grid(sets):
        table.add_row(row_label, *[
            f"{c.kana}\n[dim]{c.romaji}[/dim]" if c else "" for c in cells
        ])
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="かなのキーボード練習")
    parser.add_argument("--sets", nargs="+", default=["seion"], choices=KANA_SETS)
    parser.add_argument("--count", type=int, default=ROUND_COUNT)
    parser.add_argument("--kata", action="store_true", help="カタカナで出題する")
    parser.add_argument("--grid", action="store_true", help="最初に五十音図を表示")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)
    settings = load_settings()
    audio = AudioManager(enabled=settings.sound_enabled, volume=settings.sfx_volume)

    if args.grid:
        show_grid(args.sets)

    drill = KanaDrill(args.sets, round_count=args.count)
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TextColumn("[bold green]{task.fields[status]}", justify="right"),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]練習中", total=len(drill.queue), status="")
        while not drill.finished:
            kana = drill.current
            shown = kana.kata if args.kata else kana.kana
            try:
                answer = console.input(f"[bold]{shown}[/bold] > ")
            except (KeyboardInterrupt, EOFError):
                break
            if drill.submit(answer):
                audio.play_correct()
                status = f"OK  連続 {drill.streak}"
            else:
                audio.play_error()
                alt = f" / {kana.alt_romaji}" if kana.alt_romaji else ""
                status = f"NG  {kana.romaji}{alt}"
            progress.update(task, advance=1, status=status)

    audio.play_game_over()
    stats = drill.stats()
    if not stats:
        return
    table = Table(title="結果")
    table.add_column("項目")
    table.add_column("結果", justify="right")
    table.add_row("正解", f"{stats['correct']} / {stats['total']}")
    table.add_row("正確率", f"{stats['accuracy']}%")
    table.add_row("WPM", str(stats["wpm"]))
    table.add_row("平均時間", f"{stats['avg_ms']} ms")
    if stats["top_wrong"]:
        table.add_row("よく間違えたかな", " ".join(f"{k}×{n}" for k, n in stats["top_wrong"]))
    console.print(table)


if __name__ == "__main__":
    main()
