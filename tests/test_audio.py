"""
効果音 (AudioManager) のテスト
"""

from unittest.mock import Mock

from kanatype.audio import AudioManager


class TestAudioManager:

    def test_rings_bell(self):
        console = Mock()
        audio = AudioManager(console=console)
        audio.play_error()
        assert console.bell.call_count == 2

    def test_disabled(self):
        console = Mock()
        audio = AudioManager(console=console)
        audio.set_settings(enabled=False, volume=0.7)
        audio.play_correct()
        audio.set_settings(enabled=True, volume=0)
        audio.play_game_over()
        console.bell.assert_not_called()

    def test_failure_is_ignored(self):
        console = Mock()
        console.bell.side_effect = OSError("no terminal")
        AudioManager(console=console).play_miss()
