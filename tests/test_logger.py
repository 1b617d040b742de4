import re
import threading

import pytest

from nebulastore.logger import Logger, SubsysID, dout, get_logger


@pytest.fixture
def log_path(tmp_path):
    path = tmp_path / "nebula_test.log"
    get_logger().init(str(path))
    yield path
    get_logger().init("")


def _lines(path):
    return path.read_text(encoding="utf-8").splitlines()


def test_basic_logging_writes_five_lines(log_path):
    dout(1).write("info log (level=1)").commit()
    dout(5).write("debug log (level=5)").commit()
    dout(-1).write("error log (level=-1)").commit()
    dout(0).write("warn log (level=0)").commit()
    dout(1).write("dinfo log (level=1)").commit()
    assert len(_lines(log_path)) == 5


def test_stream_interface_joins_parts(log_path):
    dout(5).write("create file: ", "test.txt", ", inode=", 12345, ", size=", 1024 * 1024).commit()
    (line,) = _lines(log_path)
    assert line.endswith("create file: test.txt, inode=12345, size=1048576")


def test_subsystem_logging(log_path):
    dout(5, SubsysID.METADATA).write("create dentry").commit()
    dout(5, SubsysID.ROCKSDB).write("put key").commit()
    dout(5, SubsysID.STORAGE).write("put done").commit()
    dout(3, SubsysID.HTTP_SERVER).write("GET /").commit()
    text = log_path.read_text(encoding="utf-8")
    for tag in ("[metadata]", "[rocksdb]", "[storage]", "[http_server]"):
        assert tag in text


def test_level_filtering(log_path):
    dout(5).write("should appear level=5").commit()
    dout(6).write("filtered level=6").commit()
    dout(10).write("filtered level=10").commit()
    lines = _lines(log_path)
    assert len(lines) == 1
    assert "level=6" not in lines[0] and "level=10" not in lines[0]


def test_dynamic_level_change(log_path):
    dout(10).write("[initial] hidden").commit()
    get_logger().set_subsys_level(SubsysID.METADATA, 20)
    dout(10, SubsysID.METADATA).write("[adjusted] shown").commit()
    dout(15, SubsysID.METADATA).write("[adjusted] shown too").commit()
    text = log_path.read_text(encoding="utf-8")
    assert "[initial]" not in text
    assert text.count("[adjusted]") == 2


def test_multithreaded_logging(log_path):
    def work(i):
        for j in range(100):
            dout(1).write("thread ", i, ": log ", j).commit()

    threads = [threading.Thread(target=work, args=(i,)) for i in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(_lines(log_path)) >= 400


def test_log_format(log_path):
    dout(1).write("format check").commit()
    last = [line for line in _lines(log_path) if line][-1]
    pattern = r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{6} [0-9a-f]+ \[[^\]]+\] -?\d+ .+$"
    assert re.match(pattern, last)
    assert "[_default] 1 format check" in last


def test_context_manager_commits(log_path):
    with dout(1) as entry:
        entry.write("scoped log")
    assert any("scoped log" in line for line in _lines(log_path))


def test_init_resets_levels(tmp_path):
    logger = Logger()
    logger.set_subsys_level(SubsysID.STORAGE, 20)
    assert logger.get_subsys_level(SubsysID.STORAGE) == 20
    logger.init(str(tmp_path / "a.log"))
    assert logger.get_subsys_level(SubsysID.STORAGE) == 5
    logger.close()


def test_unknown_subsystem():
    logger = Logger()
    assert logger.should_gather(99, 0) is False
    assert logger.get_subsys_level(99) == logger.default_level


def test_console_output_streams(capsys):
    logger = Logger()
    logger.write_log(SubsysID.STORAGE, -1, "broken")
    logger.write_log(SubsysID.STORAGE, 1, "fine")
    captured = capsys.readouterr()
    assert "[storage] -1 broken" in captured.err
    assert "[storage] 1 fine" in captured.out


def test_tagged_messages_to_file(tmp_path):
    path = tmp_path / "tagged.log"
    logger = Logger()
    logger.init(str(path))
    logger.info("a")
    logger.warn("b")
    logger.error("c")
    logger.debug("d")
    logger.close()
    assert _lines(path) == ["[INFO] a", "[WARN] b", "[ERROR] c", "[DEBUG] d"]


def test_get_logger_shares_state_between_calls():
    original = get_logger().get_subsys_level(SubsysID.STORAGE)
    try:
        get_logger().set_subsys_level(SubsysID.STORAGE, 17)
        assert get_logger().get_subsys_level(SubsysID.STORAGE) == 17
    finally:
        get_logger().set_subsys_level(SubsysID.STORAGE, original)
    assert get_logger().get_subsys_level(SubsysID.STORAGE) == original