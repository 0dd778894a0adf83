import argparse
import logging

from rich.console import Console
from rich.table import Table

from kanatype.wpm_calculator import format_time, round_half_up
from kanatype import storage

console = Console()

MODE_LABELS = {
    "falling-words": "落下単語",
    "word-practice": "単語練習",
}
TREND_SIZE = 10
HISTORY_SIZE = 20
TOP_MISTAKES = 10


def mode_label(mode):
    return MODE_LABELS.get(mode, mode)


def aggregate(sessions):
    """プレイ回数・平均 WPM・平均正確率・合計時間・合計単語数"""
    if not sessions:
        return None
    return {
        "plays": len(sessions),
        "avg_wpm": round_half_up(sum(s.wpm for s in sessions) / len(sessions)),
        "avg_accuracy": round_half_up(sum(s.accuracy for s in sessions) / len(sessions)),
        "total_duration": sum(s.duration for s in sessions),
        "total_words": sum(s.total_words for s in sessions),
    }


def wpm_trend(sessions, size=TREND_SIZE):
    """直近 size 回の WPM (古い順)"""
    return [s.wpm for s in sessions[-size:]]


def newest_first(sessions, mode=None):
    return [s for s in reversed(sessions) if mode is None or s.mode == mode]


def top_mistakes(mistakes, size=TOP_MISTAKES):
    return sorted(mistakes, key=lambda m: m.mistake_count, reverse=True)[:size]


def show_summary(sessions):
    summary = aggregate(sessions)
    if not summary:
        console.print("[dim]まだ記録がありません[/dim]")
        return
    table = Table(title="概要")
    table.add_column("項目")
    table.add_column("値", justify="right")
    table.add_row("プレイ回数", str(summary["plays"]))
    table.add_row("平均 WPM", str(summary["avg_wpm"]))
    table.add_row("平均正確率", f"{summary['avg_accuracy']}%")
    table.add_row("合計時間", format_time(summary["total_duration"]))
    table.add_row("合計単語数", str(summary["total_words"]))
    table.add_row("WPM 推移", " ".join(str(w) for w in wpm_trend(sessions)))
    console.print(table)


def show_best_records(records):
    table = Table(title="最高記録")
    table.add_column("モード")
    table.add_column("最高 WPM", justify="right")
    table.add_column("最高正確率", justify="right")
    table.add_column("回数", justify="right")
    for mode, record in records.items():
        if not isinstance(record, dict):
            logging.warning(f"Skipping broken best record: {mode}")
            continue
        table.add_row(mode_label(mode), str(record.get("best_wpm", 0)),
                      f"{record.get('best_accuracy', 0)}%", str(record.get("total_sessions", 0)))
    console.print(table)


def show_history(sessions, mode=None):
    table = Table(title="履歴")
    table.add_column("日時")
    table.add_column("モード")
    table.add_column("Lv", justify="right")
    table.add_column("WPM", justify="right")
    table.add_column("正確率", justify="right")
    table.add_column("単語", justify="right")
    table.add_column("時間", justify="right")
    for s in newest_first(sessions, mode)[:HISTORY_SIZE]:
        table.add_row(s.timestamp[:16].replace("T", " "), mode_label(s.mode), str(s.level),
                      str(s.wpm), f"{s.accuracy}%", f"{s.correct_words}/{s.total_words}",
                      format_time(s.duration))
    console.print(table)


def show_mistakes(mistakes):
    if not mistakes:
        return
    table = Table(title="よく間違える単語")
    table.add_column("単語")
    table.add_column("読み")
    table.add_column("回数", justify="right")
    for m in top_mistakes(mistakes):
        table.add_row(m.word.japanese, m.word.reading, str(m.mistake_count))
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="プレイ記録を表示する")
    parser.add_argument("--mode", choices=sorted(MODE_LABELS), help="履歴をモードで絞り込む")
    parser.add_argument("--clear", action="store_true", help="履歴と最高記録を削除する")
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    if args.clear:
        storage.clear_sessions()
        console.print("[yellow]記録を削除しました[/yellow]")
        return

    sessions = storage.load_sessions()
    show_summary(sessions)
    if not sessions:
        return
    show_best_records(storage.load_best_records())
    show_history(sessions, args.mode)
    show_mistakes(storage.load_mistakes())


if __name__ == "__main__":
    main()
