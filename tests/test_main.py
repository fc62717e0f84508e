from main import main


def test_headless_session_prints_stats(capsys):
    stats = main(["--seed", "3", "--max-moves", "5", "--difficulty", "easy", "--strategy", "random"])
    out = capsys.readouterr().out
    assert "Moves played: 5" in out
    assert stats["difficulty"] == "easy"
    assert stats["score"] > 0
