from ftpweb.services.utils.listing_parser import parse_list_line, parse_listing
from ftpweb.services.utils.types import EntryKind


def test_unix_file_line():
    entry = parse_list_line("-rw-r--r--   1 ftp ftp       2048 Mar  3  2023 readme.txt")
    assert entry.name == "readme.txt"
    assert entry.kind is EntryKind.FILE
    assert entry.size == 2048
    assert entry.last_modified == "Mar 3 2023"


def test_unix_directory_line_has_no_size():
    entry = parse_list_line("drwxr-xr-x   2 ftp ftp       4096 Jan 10 12:00 docs")
    assert entry.is_directory
    assert entry.size is None
    assert entry.last_modified == "Jan 10 12:00"


def test_unix_line_without_group_and_with_spaces_in_name():
    entry = parse_list_line("-rw-r--r-- 1 owner 512 Dec 31 23:59 my notes.txt")
    assert entry.name == "my notes.txt"
    assert entry.size == 512


def test_symlink_target_is_stripped():
    entry = parse_list_line("lrwxrwxrwx 1 root root 11 Jan  1 00:00 latest -> release-1.2")
    assert entry.name == "latest"
    assert entry.kind is EntryKind.FILE


def test_dos_lines():
    directory = parse_list_line("03-14-21  09:26AM       <DIR>          backups")
    assert directory.is_directory
    assert directory.name == "backups"
    assert directory.last_modified == "2021-03-14 09:26"

    file_entry = parse_list_line("12-01-2020  01:05PM            1,234 data.csv")
    assert file_entry.kind is EntryKind.FILE
    assert file_entry.size == 1234
    assert file_entry.last_modified == "2020-12-01 13:05"


def test_unparsable_lines_return_none():
    assert parse_list_line("total 12") is None
    assert parse_list_line("") is None
    assert parse_list_line("garbage without structure") is None
    assert parse_list_line("13-45-21  09:26AM       <DIR>          bad-date") is None


def test_parse_listing_keeps_order_and_drops_malformed_lines():
    lines = [
        "-rw-r--r-- 1 ftp ftp 10 Jan 1 2020 zeta.txt",
        "this is not an entry",
        "drwxr-xr-x 2 ftp ftp 4096 Jan 1 2020 alpha",
        "total 0",
        "-rw-r--r-- 1 ftp ftp 20 Jan 1 2020 beta.txt",
    ]
    names = [entry.name for entry in parse_listing(lines)]
    assert names == ["zeta.txt", "alpha", "beta.txt"]
