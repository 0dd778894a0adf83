import argparse
import logging

from rich.console import Console
from rich.progress import Progress, BarColumn, TextColumn
from rich.table import Table

from kanatype.audio import AudioManager
from kanatype.models import InputMode
from kanatype.romaji_converter import to_romaji
from kanatype.settings import load_settings
from kanatype.word_practice import WordPractice, WORD_COUNT, WORD_COUNT_CHOICES
from kanatype import storage, word_bank

console = Console()


def answer_line(practice, line):
    """1行分の入力を渡す。ローマ字は1文字ずつ、かなは IME の確定と同じ扱い"""
    if practice.input_mode == InputMode.ROMAJI:
        for i in range(1, len(line) + 1):
            if practice.type_text(line[:i]):
                return True
    else:
        practice.composition_start()
        if practice.composition_end(line):
            return True
    return practice.submit(line)


def main():
    parser = argparse.ArgumentParser(description="単語帳の単語を順番に打つ練習")
    parser.add_argument("--list", dest="list_ids", nargs="+", help="単語帳の ID (複数可)")
    parser.add_argument("--count", type=int, default=WORD_COUNT, choices=WORD_COUNT_CHOICES)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings()
    list_ids = args.list_ids or [settings.selected_word_list_id]
    words = word_bank.get_words_by_list_ids(list_ids)
    if not words:
        console.print(f"[red]単語帳が見つかりません: {', '.join(list_ids)}[/red]")
        return

    audio = AudioManager(enabled=settings.sound_enabled, volume=settings.sfx_volume)
    practice = WordPractice(words, count=args.count, input_mode=settings.input_mode)

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TextColumn("[bold green]{task.fields[status]}", justify="right"),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]練習中", total=len(practice.queue), status="")
        while not practice.finished:
            word = practice.current
            hint = f"  [dim]{word.reading}[/dim]" if settings.show_furigana else ""
            try:
                line = console.input(f"[bold]{word.japanese}[/bold]{hint} > ").strip()
            except (KeyboardInterrupt, EOFError):
                break
            if answer_line(practice, line):
                audio.play_correct()
                status = "OK"
            else:
                audio.play_error()
                status = f"NG  {word.reading} ({word.romaji or to_romaji(word.reading)})"
            progress.update(task, advance=1, status=status)

    audio.play_game_over()
    stats = practice.stats()
    if not stats:
        return

    record = practice.summary(word_list_id=",".join(list_ids))
    if not storage.record_round(record):
        logging.warning("Failed to save the practice result.")
    for word in practice.wrong_words():
        if not storage.count_mistake(word):
            logging.warning(f"Failed to save the mistake for {word.id}.")

    table = Table(title="結果")
    table.add_column("項目")
    table.add_column("結果", justify="right")
    table.add_row("正解", f"{stats['correct']} / {stats['total']}")
    table.add_row("正確率", f"{stats['accuracy']}%")
    table.add_row("WPM", str(stats["wpm"]))
    table.add_row("平均時間", f"{stats['avg_sec']} 秒")
    console.print(table)

    wrong = [r for r in practice.results if not r.correct]
    if wrong:
        table = Table(title="間違えた単語")
        table.add_column("単語")
        table.add_column("読み")
        table.add_column("入力")
        for r in wrong:
            table.add_row(r.word.japanese, r.word.reading, r.input or "-")
        console.print(table)


if __name__ == "__main__":
    main()
