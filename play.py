import argparse
import logging

from rich.console import Console
from rich.table import Table

from kanatype.audio import AudioManager
from kanatype.game_loop import GameLoop, Countdown
from kanatype.game_store import GameStore, START_LIVES
from kanatype.input_store import TypingSession
from kanatype.matching import get_input_progress
from kanatype.models import GameStatus, InputMode
from kanatype.romaji_converter import to_romaji
from kanatype.settings import load_settings
from kanatype.wpm_calculator import format_time
from kanatype import storage, word_bank

console = Console()


def render_hud(store, settings):
    """落下中の単語と HUD を表示する"""
    state = store.state
    table = Table(title=f"Lv.{state.level}  score {state.score}  combo {state.combo}  "
                        f"{'♥' * state.lives}{'♡' * max(0, START_LIVES - state.lives)}  "
                        f"{format_time(state.elapsed)}")
    table.add_column("単語")
    if settings.show_furigana:
        table.add_column("読み")
        table.add_column("ローマ字")
    if settings.show_meaning:
        table.add_column("意味")
    table.add_column("高さ", justify="right")

    for fw in sorted(state.falling_words, key=lambda w: -w.y):
        if fw.is_matched:
            continue
        row = [f"[{fw.color}]{fw.word.japanese}[/]"]
        if settings.show_furigana:
            row += [fw.word.reading, fw.word.romaji or to_romaji(fw.word.reading)]
        if settings.show_meaning:
            row.append(fw.word.meaning)
        row.append(f"{max(0, fw.y):.0f}")
        table.add_row(*row)
    console.print(table)


def render_result(store, record):
    state = store.state
    title = "CLEAR!" if state.status == GameStatus.CLEAR else "GAME OVER"
    table = Table(title=title)
    table.add_column("項目")
    table.add_column("結果", justify="right")
    table.add_row("スコア", str(state.score))
    table.add_row("最大コンボ", str(state.max_combo))
    table.add_row("正解した単語", str(state.correct_words))
    table.add_row("WPM", str(record.wpm))
    table.add_row("正確率", f"{record.accuracy}%")
    table.add_row("時間", format_time(state.elapsed))
    console.print(table)


def main():
    parser = argparse.ArgumentParser(description="落ちてくる単語をタイピングで消すゲーム")
    parser.add_argument("--level", type=int, help="1 ~ 5 (省略時は設定の speed)")
    parser.add_argument("--list", dest="list_id", help="単語帳の ID")
    parser.add_argument("--count", type=int, default=200, help="使う単語の数")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    settings = load_settings()
    list_id = args.list_id or settings.selected_word_list_id
    word_list = word_bank.get_word_list_by_id(list_id)
    words = word_bank.pick_words(word_list, args.count) if word_list else []
    if not words:
        console.print(f"[red]単語帳が見つかりません: {list_id}[/red]")
        return

    level = args.level or settings.speed
    audio = AudioManager(enabled=settings.sound_enabled, volume=settings.sfx_volume)
    store = GameStore()
    session = TypingSession(store, audio=audio)
    session.set_input_mode(settings.input_mode)
    loop = GameLoop(store, on_miss=lambda n: audio.play_miss())

    store.start_game(words, level=level, clear_on_exhaust=True)
    console.print(f"[bold]{word_list.name}[/bold]  Lv.{store.level} "
                  f"(最大 {store.level_config.max_on_screen} 単語)")
    console.print("単語の読みを入力して Enter。 :p で一時停止/再開、:q で終了")

    Countdown(store, audio=audio).run()
    loop.start()
    try:
        while store.status in (GameStatus.PLAYING, GameStatus.PAUSED):
            render_hud(store, settings)
            line = console.input("> ").strip()
            if line == ":q":
                store.end_game()
                break
            if line == ":p":
                session.escape()
                console.print(f"[yellow]{store.status.value}[/yellow]")
                continue
            if store.status != GameStatus.PLAYING:
                continue
            matched = False
            if session.input.input_mode == InputMode.ROMAJI:
                for ch in line:
                    matched = session.type_key(ch)
                    if matched:
                        break
            else:
                # かな入力は IME の確定と同じ扱い
                session.composition_start()
                matched = session.composition_end(line)
            if not matched:
                best = max((get_input_progress(line, w.word, session.input.input_mode)
                            for w in store.active_words()), default=0)
                console.print(f"[red]ミス[/red] (進捗 {best:.0%})")
                audio.play_error()
                session.input.clear_input()
    except (KeyboardInterrupt, EOFError):
        store.end_game()
    finally:
        loop.stop()

    audio.play_game_over()
    record = store.summary(word_list_id=list_id)
    if not storage.record_round(record):
        logging.warning("Failed to save the round result.")
    for word in store.state.missed_words:
        if not storage.count_mistake(word):
            logging.warning(f"Failed to save the mistake for {word.id}.")
    render_result(store, record)


if __name__ == "__main__":
    main()
