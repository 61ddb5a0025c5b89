"""Smoke tests for the compile demo."""

from compile_demo import SAMPLES, compile_panel, main


class TestCompilePanel:
    """Tests for sample panels."""

    def test_compiled_sample(self) -> None:
        """A valid diagram gets a green panel with its call tree."""
        panel = compile_panel("print_product", SAMPLES["print_product"])

        assert panel.border_style == "green"
        assert "└─ *" in panel.renderable.plain

    def test_failing_sample(self) -> None:
        """A broken diagram gets a red panel titled with the error kind."""
        panel = compile_panel("dangling", SAMPLES["dangling"])

        assert panel.border_style == "red"
        assert panel.title == "dangling - dangling_edge"

    def test_block_error_sample(self) -> None:
        """Samples failing during block detection still render the grid."""
        panel = compile_panel("unterminated", SAMPLES["unterminated"])

        assert panel.title == "unterminated - unterminated_block"
        assert "└── ──┘" in panel.renderable.plain

    def test_unreadable_sample(self) -> None:
        """A diagram that cannot be normalized shows its message without a grid."""
        panel = compile_panel("invalid_character", SAMPLES["invalid_character"])

        assert panel.title == "invalid_character - invalid_character"
        assert panel.renderable.plain.startswith("invalid_character: ")
        assert "│" not in panel.renderable.plain


class TestMain:
    """Tests for the demo entry point."""

    def test_unknown_sample_reported(self, capsys) -> None:
        """Unknown names are reported instead of raising."""
        main(["nope"])

        assert "Unknown sample" in capsys.readouterr().out

    def test_all_samples_print(self, capsys) -> None:
        """Every sample renders without raising."""
        main([])

        out = capsys.readouterr().out
        for name in SAMPLES:
            assert name in out
