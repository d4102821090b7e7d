from pathlib import Path

import pytest

from meshviewer.filebrowser import FileBrowser, FileBrowserFlags, FileRecord


@pytest.fixture
def tree(tmp_path):
    for name in ("a.obj", "b.png", "c.txt", "$hidden.obj", "archive.tar.gz", ".hidden"):
        (tmp_path / name).write_text("x")
    (tmp_path / "sub").mkdir()
    return tmp_path


def make(tree, flags=FileBrowserFlags.NONE):
    browser = FileBrowser(flags)
    assert browser.set_pwd(tree)
    return browser


def test_defaults():
    browser = FileBrowser()
    assert (browser.width, browser.height) == (700, 450)
    assert browser.title == "file browser"
    assert browser.pwd == Path.cwd()
    assert not browser.has_selected()


def test_listing_sorted_dirs_first(tree):
    browser = make(tree)
    names = [record.name for record in browser.records]
    assert names[:2] == ["..", "sub"]
    files = names[2:]
    assert files == sorted(files)
    assert set(files) == {"a.obj", "b.png", "c.txt", "$hidden.obj", "archive.tar.gz", ".hidden"}
    assert browser.records[0] == FileRecord(True, "..", "[D] ..", "")
    assert browser.pwd == tree.absolute()


def test_record_show_names_and_extensions(tree):
    browser = make(tree)
    by_name = {record.name: record for record in browser.records}
    assert by_name["a.obj"].show_name == "[F] a.obj"
    assert by_name["sub"].show_name == "[D] sub"
    assert by_name["archive.tar.gz"].extension == ".gz"
    assert by_name[".hidden"].extension == ""


def test_dollar_entries_hidden(tree):
    browser = make(tree)
    names = [record.name for record in browser.visible_records()]
    assert "$hidden.obj" not in names
    assert "a.obj" in names


def test_set_pwd_failure_falls_back_to_cwd(tree, monkeypatch):
    monkeypatch.chdir(tree)
    browser = FileBrowser()
    assert browser.set_pwd(tree / "missing") is False
    assert browser.status.startswith("last error: ")
    assert browser.pwd == Path.cwd()


def test_combined_type_filter(tree):
    browser = make(tree)
    browser.set_type_filters([".jpg", ".png"])
    assert browser.type_filters == [".jpg,.png", ".jpg", ".png"]
    assert browser.has_all_filter
    assert browser.is_extension_matched(".png")
    assert not browser.is_extension_matched(".obj")
    names = [record.name for record in browser.visible_records()]
    assert "b.png" in names and "a.obj" not in names and "sub" in names


def test_single_filter_and_universal(tree):
    browser = make(tree)
    browser.set_type_filters([".obj"])
    assert browser.type_filters == [".obj"]
    assert browser.is_extension_matched(".obj")
    assert not browser.is_extension_matched(".png")
    browser.set_type_filters([".obj", ".*"])
    assert not browser.has_all_filter
    assert browser.type_filters == [".obj", ".*"]
    browser.set_current_type_filter_index(1)
    assert browser.is_extension_matched(".anything")


def test_no_filters_or_invalid_index_match_everything(tree):
    browser = make(tree)
    assert browser.is_extension_matched(".xyz")
    browser.set_type_filters([".obj"])
    browser.set_current_type_filter_index(5)
    assert browser.is_extension_matched(".xyz")
    browser.set_current_type_filter_index(-1)
    assert browser.is_extension_matched(".xyz")


def test_click_selects_file(tree):
    browser = make(tree)
    browser.click("a.obj")
    assert browser.selected() == browser.pwd / "a.obj"
    assert browser.input_name == "a.obj"
    browser.click("b.png")
    assert browser.multi_selected() == [browser.pwd / "b.png"]
    browser.click("b.png")
    assert browser.selected() == browser.pwd
    assert browser.input_name == ""


def test_click_directory_ignored_for_file_mode(tree):
    browser = make(tree)
    browser.click("sub")
    assert browser.selected() == browser.pwd


def test_click_unknown_raises(tree):
    browser = make(tree)
    with pytest.raises(KeyError):
        browser.click("$hidden.obj")


def test_multi_selection(tree):
    browser = make(tree, FileBrowserFlags.MULTIPLE_SELECTION)
    browser.click("b.png")
    browser.click("a.obj", multi_select=True)
    assert browser.multi_selected() == [browser.pwd / "a.obj", browser.pwd / "b.png"]
    browser.click("a.obj", multi_select=True)
    assert browser.multi_selected() == [browser.pwd / "b.png"]


def test_multi_select_needs_flag(tree):
    browser = make(tree)
    browser.click("a.obj")
    browser.click("b.png", multi_select=True)
    assert browser.multi_selected() == [browser.pwd / "b.png"]


def test_select_directory_mode(tree):
    browser = make(tree, FileBrowserFlags.SELECT_DIRECTORY)
    browser.click("a.obj")
    assert browser.selected() == browser.pwd
    browser.click("sub")
    assert browser.selected() == browser.pwd / "sub"
    assert browser.input_name == ""
    assert browser.confirm()
    assert browser.has_selected()


def test_confirm_requires_selection_for_files(tree):
    browser = make(tree)
    browser.open()
    assert browser.is_opened
    assert not browser.confirm()
    assert browser.is_opened
    browser.click("a.obj")
    assert browser.confirm()
    assert not browser.is_opened
    assert browser.selected() == browser.pwd / "a.obj"


def test_double_click_file_confirms(tree):
    browser = make(tree)
    browser.open()
    browser.double_click("c.txt")
    assert browser.has_selected()
    assert not browser.is_opened
    assert browser.selected() == browser.pwd / "c.txt"


def test_double_click_directories(tree):
    browser = make(tree)
    browser.double_click("sub")
    assert browser.pwd == (tree / "sub").absolute()
    assert [record.name for record in browser.records] == [".."]
    browser.double_click("..")
    assert browser.pwd == tree.absolute()


def test_enter_filename(tree):
    browser = make(tree, FileBrowserFlags.ENTER_NEW_FILENAME)
    browser.enter_filename("out.obj")
    assert browser.selected() == browser.pwd / "out.obj"
    assert browser.confirm()


def test_enter_filename_requires_flag(tree):
    with pytest.raises(ValueError):
        make(tree).enter_filename("out.obj")


def test_create_directory(tree):
    browser = make(tree, FileBrowserFlags.CREATE_NEW_DIR)
    assert browser.create_directory("fresh")
    assert (tree / "fresh").is_dir()
    assert "fresh" in [record.name for record in browser.records]
    assert not browser.create_directory("fresh")
    assert browser.status == "failed to create fresh"
    assert not browser.create_directory("")


def test_create_directory_requires_flag(tree):
    with pytest.raises(ValueError):
        make(tree).create_directory("fresh")


def test_open_close_clear_state(tree):
    browser = make(tree)
    browser.double_click("a.obj")
    assert browser.has_selected()
    browser.open()
    assert not browser.has_selected()
    assert browser.selected() == browser.pwd
    browser.close()
    assert not browser.is_opened


def test_cancel_closes_without_choice(tree):
    browser = make(tree)
    browser.open()
    browser.click("a.obj")
    browser.cancel()
    assert not browser.is_opened
    assert not browser.has_selected()


def test_window_size(tree):
    browser = make(tree)
    browser.set_window_size(480.0, 320.4)
    assert (browser.width, browser.height) == (480, 320)
    with pytest.raises(ValueError):
        browser.set_window_size(0, 10)


def test_copy_is_independent(tree, monkeypatch):
    monkeypatch.chdir(tree)
    browser = make(tree)
    browser.set_pwd(tree / "missing")
    browser.set_type_filters([".obj", ".png"])
    browser.click("a.obj")
    clone = browser.copy()
    assert clone.status == ""
    assert clone.type_filters == browser.type_filters
    assert clone.selected() == browser.selected()
    clone.click("b.png")
    clone.set_type_filters([".txt"])
    assert browser.selected() == browser.pwd / "a.obj"
    assert browser.type_filters != clone.type_filters