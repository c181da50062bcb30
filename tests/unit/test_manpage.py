from recompress.infrastructure.manpage import install_manpage, render_manpage

def test_render_lists_all_options():
    page = render_manpage(version="9.9")
    assert page.startswith(".TH RECOMPRESS 1")
    assert "recompress 9.9" in page
    for flag in ("force", "quality", "speed", "width", "height", "installmanpage", "help"):
        assert f"\\-\\-{flag}" in page
    assert "veryslow" in page
    assert "Default 26" in page

def test_install_writes_file(tmp_path):
    target = install_manpage(tmp_path / "man1")
    assert target == tmp_path / "man1" / "recompress.1"
    assert target.read_text() == render_manpage()
