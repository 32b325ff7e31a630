"""
Logger 分发与格式化测试
"""

import inspect
import itertools
import os
import threading
from datetime import datetime

import pytest

from conftest import FakeClock, RecordingDestination
from peeklog import (
    BufferPool,
    Flag,
    InvalidConfigurationError,
    Level,
    Logger,
    StreamHandle,
)

THIS_FILE = os.path.basename(__file__)


def _lineno() -> int:
    """调用者下一行的行号"""
    return inspect.currentframe().f_back.f_lineno + 1


class TestThreshold:
    """级别过滤测试"""

    @pytest.mark.parametrize(
        "threshold,level", list(itertools.product(list(Level), list(Level)))
    )
    def test_emit_iff_level_ge_threshold(self, threshold, level):
        """level >= threshold 时才输出"""
        rec = RecordingDestination()
        log = Logger().init(rec, threshold, Flag.NONE)

        log.log(level, "msg")

        assert len(rec.chunks) == (1 if level >= threshold else 0)

    def test_fatal_does_not_exit(self, recorder):
        """Fatal 只是级别，不退出进程"""
        log = Logger().init(recorder, Level.TRACE, Flag.NONE)
        log.fatal("boom")
        log.fatalf("boom %d", 2)
        assert recorder.lines == ["boom\n", "boom 2\n"]

    def test_set_level(self, recorder):
        """调整阈值后立即生效"""
        log = Logger().init(recorder, Level.ERROR, Flag.NONE)
        log.info("dropped")
        log.set_level(Level.DEBUG)
        log.info("kept")
        log.set_level_by_name("FATAL")
        log.error("dropped")
        assert recorder.lines == ["kept\n"]
        assert log.level == Level.FATAL

    def test_set_level_by_invalid_name(self, recorder):
        """非法级别名抛出配置错误"""
        log = Logger().init(recorder)
        with pytest.raises(InvalidConfigurationError):
            log.set_level_by_name("verbose")
        assert log.level == Level.INFO

    def test_invalid_level_on_log_is_dropped(self, recorder):
        """log 传入非法级别不抛异常"""
        log = Logger().init(recorder, Level.TRACE, Flag.NONE)
        log.log(42, "msg")
        assert recorder.chunks == []

    @pytest.mark.parametrize("level", [6, 42, -1, "loud", None])
    def test_invalid_level_on_output_is_dropped(self, recorder, level):
        """output 传入非法级别不抛异常"""
        log = Logger().init(recorder, Level.TRACE, Flag.ALL)
        log.output(1, level, "msg")
        log.info("next")
        assert len(recorder.chunks) == 1
        assert recorder.lines[0].endswith("] next\n")


class TestLayout:
    """日志头部格式测试"""

    def _logger(self, rec, flag):
        clock = FakeClock(datetime(2021, 9, 17, 23, 0, 0, 123456))
        return Logger(clock=clock).init(rec, Level.TRACE, flag)

    def test_no_flags(self, recorder):
        """没有标志时不输出方括号"""
        self._logger(recorder, Flag.NONE).info("hello")
        assert recorder.lines == ["hello\n"]

    def test_level_only(self, recorder):
        self._logger(recorder, Flag.LEVEL).info("hello")
        assert recorder.lines == ["[Info ] hello\n"]

    def test_time_only(self, recorder):
        self._logger(recorder, Flag.TIME).warn("hello")
        assert recorder.lines == ["[2021/09/17 23:00:00.123] hello\n"]

    def test_level_and_time(self, recorder):
        self._logger(recorder, Flag.LEVEL | Flag.TIME).error("hello")
        assert recorder.lines == ["[Error | 2021/09/17 23:00:00.123] hello\n"]

    def test_level_and_file(self, recorder):
        """中间字段缺失时只有一个分隔符"""
        log = self._logger(recorder, Flag.LEVEL | Flag.FILE)
        line = _lineno()
        log.debug("hello")
        assert recorder.lines == [f"[Debug | {THIS_FILE}:{line}] hello\n"]

    def test_all_flags(self, recorder):
        log = self._logger(recorder, Flag.ALL)
        line = _lineno()
        log.trace("hello")
        assert recorder.lines == [
            f"[Trace | 2021/09/17 23:00:00.123 | {THIS_FILE}:{line}] hello\n"
        ]

    def test_trailing_newline_not_doubled(self, recorder):
        log = self._logger(recorder, Flag.NONE)
        log.info("line\n")
        log.info("")
        assert recorder.lines == ["line\n", "\n"]

    def test_values_joined_with_space(self, recorder):
        self._logger(recorder, Flag.NONE).info("a", 1, None)
        assert recorder.lines == ["a 1 None\n"]

    def test_printf_style(self, recorder):
        log = self._logger(recorder, Flag.NONE)
        log.infof("%s %d", "hello", 123)
        log.log(Level.INFO, "%(name)s!", {"name": "peek"})
        assert recorder.lines == ["hello 123\n", "peek!\n"]

    def test_bad_format_does_not_raise(self, recorder):
        """格式化参数不匹配时原样输出"""
        log = self._logger(recorder, Flag.NONE)
        log.infof("%d items", "many")
        assert recorder.lines == ["%d items many\n"]

    def test_percent_without_args_is_literal(self, recorder):
        self._logger(recorder, Flag.NONE).info("100%")
        assert recorder.lines == ["100%\n"]

    def test_set_flag(self, recorder):
        log = self._logger(recorder, Flag.ALL)
        log.set_flag(["level"])
        log.info("hello")
        assert log.flag == Flag.LEVEL
        assert recorder.lines == ["[Info ] hello\n"]

    def test_level_names(self, recorder):
        log = self._logger(recorder, Flag.LEVEL)
        for level in Level:
            log.log(level, "x")
        assert recorder.lines == [
            "[Trace] x\n",
            "[Debug] x\n",
            "[Info ] x\n",
            "[Warn ] x\n",
            "[Error] x\n",
            "[Fatal] x\n",
        ]


class TestCaller:
    """调用位置测试"""

    def test_every_wrapper_reports_caller(self, recorder):
        log = Logger().init(recorder, Level.TRACE, Flag.FILE)
        methods = [
            log.trace, log.debug, log.info, log.warn, log.error, log.fatal,
            log.tracef, log.debugf, log.infof, log.warnf, log.errorf, log.fatalf,
        ]
        expected = []
        for method in methods:
            expected.append(f"[{THIS_FILE}:{_lineno()}] x\n")
            method("x")
        assert recorder.lines == expected

    def test_log_stacklevel(self, recorder):
        """stacklevel 跳过日志封装函数"""
        log = Logger().init(recorder, Level.TRACE, Flag.FILE)

        def wrapper(msg):
            log.log(Level.INFO, msg, stacklevel=2)

        line = _lineno()
        wrapper("x")
        assert recorder.lines == [f"[{THIS_FILE}:{line}] x\n"]

    def test_explicit_caller(self, recorder):
        log = Logger().init(recorder, Level.TRACE, Flag.FILE)
        log.output(1, Level.INFO, "x", caller=("/src/app/main.py", 10))
        assert recorder.lines == ["[main.py:10] x\n"]

    def test_depth_beyond_stack(self, recorder):
        log = Logger().init(recorder, Level.TRACE, Flag.FILE)
        log.output(10000, Level.INFO, "x")
        assert recorder.lines == ["[???:0] x\n"]


class TestLifecycle:
    """关闭与替换输出目标测试"""

    def test_close_is_idempotent(self, recorder):
        """重复关闭只关闭一次输出目标"""
        log = Logger().init(recorder)
        log.close()
        log.close()
        assert recorder.close_count == 1
        assert log.closed

    def test_concurrent_close(self, recorder):
        log = Logger().init(recorder)
        threads = [threading.Thread(target=log.close) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert recorder.close_count == 1

    def test_log_after_close_is_dropped(self, recorder):
        log = Logger().init(recorder, Level.TRACE, Flag.NONE)
        log.info("before")
        log.close()
        log.info("after")
        assert recorder.lines == ["before\n"]

    def test_context_manager(self, recorder):
        with Logger().init(recorder, Level.TRACE, Flag.NONE) as log:
            log.info("x")
        assert recorder.close_count == 1

    def test_set_handler_closes_previous(self, recorder):
        log = Logger().init(recorder, Level.TRACE, Flag.NONE)
        log.info("first")
        other = RecordingDestination()
        log.set_handler(other)
        log.info("second")

        assert recorder.close_count == 1
        assert recorder.lines == ["first\n"]
        assert other.lines == ["second\n"]
        assert log.handler is other

    def test_set_same_handler_keeps_it_open(self, recorder):
        log = Logger().init(recorder)
        log.set_handler(recorder)
        assert recorder.close_count == 0

    def test_set_handler_after_close(self, recorder):
        """已关闭的 Logger 直接关闭新的输出目标"""
        log = Logger().init(recorder)
        log.close()
        other = RecordingDestination()
        log.set_handler(other)
        assert other.close_count == 1
        assert log.handler is None

    def test_write_error_is_swallowed(self):
        rec = RecordingDestination(fail=True)
        log = Logger().init(rec, Level.TRACE, Flag.NONE)
        log.info("x")
        log.errorf("%s", "y")

    def test_uninitialized_logger_drops(self):
        log = Logger()
        log.fatal("nothing bound")
        log.close()

    def test_init_rejects_invalid_level(self, recorder):
        with pytest.raises(InvalidConfigurationError):
            Logger().init(recorder, 9)
        with pytest.raises(InvalidConfigurationError):
            Logger().init(recorder, "loud")

    def test_buffers_return_to_pool(self, recorder):
        pool = BufferPool(capacity=4)
        log = Logger(pool=pool).init(recorder, Level.TRACE, Flag.NONE)
        for i in range(10):
            log.info(i)
        assert len(pool) == 1
        assert recorder.lines == [f"{i}\n" for i in range(10)]


class TestInitStd:
    """标准输出测试"""

    def test_init_std(self, capsys):
        log = Logger().init_std(Level.INFO, Flag.LEVEL)
        log.info("to stdout")
        log.debug("dropped")
        log.close()
        assert capsys.readouterr().out == "[Info ] to stdout\n"

    def test_init_std_custom_writer(self):
        import io

        buf = io.BytesIO()
        log = Logger().init_std(Level.TRACE, Flag.NONE, writer=buf)
        log.info("hello")
        assert buf.getvalue() == b"hello\n"
        assert isinstance(log.handler, StreamHandle)
