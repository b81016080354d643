import io
from datetime import timedelta

import pytest

from kprocfs.core import ExplicitSystemInfo, InternalError, NotFoundError
from kprocfs.kernel import (
    ConfigKind,
    ConfigSetting,
    CpuTime,
    KernelCmdline,
    KernelConfig,
    KernelModules,
    KernelStats,
    LoadAverage,
    VmStat,
)

SYSTEM_INFO = ExplicitSystemInfo(
    boot_time_secs=1692972606, ticks_per_second=100, page_size=4096, is_little_endian=True
)


def test_loadavg_from_reader():
    load = LoadAverage.parse(b"2.63 1.00 1.42 3/4280 2496732")
    assert load.one == 2.63
    assert load.five == 1.00
    assert load.fifteen == 1.42
    assert load.max == 4280
    assert load.cur == 3
    assert load.latest_pid == 2496732


def test_loadavg_from_stream():
    load = LoadAverage.parse(io.StringIO("0.50 0.25 0.10 1/100 42\n"))
    assert (load.one, load.cur, load.max, load.latest_pid) == (0.5, 1, 100, 42)


@pytest.mark.parametrize(
    "text", ["2.63 1.00 1.42 3/4280", "abc 1.00 1.42 3/4280 1", "2.63 1.00 1.42 3 1", ""]
)
def test_loadavg_errors(text):
    with pytest.raises(InternalError):
        LoadAverage.parse(text)


def test_config_setting_from_str():
    assert ConfigSetting.from_str("y") == ConfigSetting(ConfigKind.YES)
    assert ConfigSetting.from_str("m") == ConfigSetting(ConfigKind.MODULE)
    assert ConfigSetting.from_str('"abc"') == ConfigSetting(ConfigKind.VALUE, '"abc"')


def test_kernel_config():
    text = "# comment\nCONFIG_A=y\nCONFIG_B=m\nCONFIG_C=val=ue\n\nNOEQUALS\n"
    config = KernelConfig.parse(text)
    assert config.settings == {
        "CONFIG_A": ConfigSetting(ConfigKind.YES),
        "CONFIG_B": ConfigSetting(ConfigKind.MODULE),
        "CONFIG_C": ConfigSetting(ConfigKind.VALUE, "val=ue"),
    }


def test_cpu_time_minimal():
    cpu = CpuTime.from_line("cpu 1 2 3 4", 100)
    assert (cpu.user, cpu.nice, cpu.system, cpu.idle) == (1, 2, 3, 4)
    assert cpu.user_ms() == 10
    assert cpu.nice_ms() == 20
    assert cpu.system_ms() == 30
    assert cpu.idle_ms() == 40
    assert cpu.user_duration() == timedelta(milliseconds=10)
    assert cpu.idle_duration() == timedelta(milliseconds=40)
    assert cpu.iowait is None
    assert cpu.iowait_ms() is None
    assert cpu.guest_nice_duration() is None


def test_cpu_time_full():
    cpu = CpuTime.from_line("cpu0 1 2 3 4 5 6 7 8 9 10 11", 100)
    assert cpu.iowait_ms() == 50
    assert cpu.irq_ms() == 60
    assert cpu.softirq_ms() == 70
    assert cpu.steal_ms() == 80
    assert cpu.guest_ms() == 90
    assert cpu.guest_nice_ms() == 100
    assert cpu.steal_duration() == timedelta(milliseconds=80)
    assert cpu.guest_duration() == timedelta(milliseconds=90)


@pytest.mark.parametrize("line", ["cpu 1 2 3", "cpu 1 2 3 x", "cpu 1 2 3 4 bad"])
def test_cpu_time_errors(line):
    with pytest.raises(InternalError):
        CpuTime.from_line(line, 100)


STAT = """cpu  1 2 3 4 5 6 7 0 0 0
cpu0 1 1 1 1
cpu1 0 1 2 2
intr 12345 0 0
ctxt 1000
btime 1692972606
processes 5000
procs_running 2
procs_blocked 0
"""


def test_kernel_stats():
    stats = KernelStats.parse(STAT, SYSTEM_INFO)
    assert stats.total.user == 1
    assert stats.total.softirq == 7
    assert len(stats.cpu_time) == 2
    assert stats.cpu_time[1].idle == 2
    assert stats.ctxt == 1000
    assert stats.btime == 1692972606
    assert stats.processes == 5000
    assert stats.procs_running == 2
    assert stats.procs_blocked == 0


def test_kernel_stats_optional_missing():
    stats = KernelStats.parse("cpu 1 2 3 4\nctxt 1\nbtime 2\nprocesses 3\n", SYSTEM_INFO)
    assert stats.cpu_time == []
    assert stats.procs_running is None
    assert stats.procs_blocked is None


def test_kernel_stats_missing_required():
    with pytest.raises(InternalError):
        KernelStats.parse("cpu 1 2 3 4\nctxt 1\nprocesses 3\n", SYSTEM_INFO)


def test_kernel_stats_from_file(tmp_path):
    path = tmp_path / "stat"
    path.write_text(STAT)
    stats = KernelStats.from_file(path, SYSTEM_INFO)
    assert stats.processes == 5000


def test_vmstat():
    stat = VmStat.parse("nr_free_pages 12345\nnr_weird -3\n")
    assert stat.values == {"nr_free_pages": 12345, "nr_weird": -3}


def test_vmstat_bad_value():
    with pytest.raises(InternalError):
        VmStat.parse("nr_free_pages\n")


def test_kernel_modules():
    text = (
        "snd_hda_intel 53248 3 - Live 0x0000000000000000\n"
        "snd 94208 12 snd_hda_intel,snd_pcm, Live 0x0000000000000000\n"
        "unloading 100 -1 - Unloading 0x0000000000000000\n"
    )
    modules = KernelModules.parse(text).modules
    assert set(modules) == {"snd_hda_intel", "snd", "unloading"}
    assert modules["snd_hda_intel"].used_by == []
    assert modules["snd_hda_intel"].size == 53248
    assert modules["snd"].used_by == ["snd_hda_intel", "snd_pcm"]
    assert modules["snd"].refcount == 12
    assert modules["unloading"].refcount == -1
    assert modules["unloading"].state == "Unloading"


def test_kernel_modules_incomplete():
    with pytest.raises(InternalError):
        KernelModules.parse("name 100 1 -\n")


def test_kernel_cmdline():
    cmdline = KernelCmdline.parse(b"BOOT_IMAGE=/vmlinuz  root=/dev/sda1 quiet")
    assert cmdline.args == ["BOOT_IMAGE=/vmlinuz", "root=/dev/sda1", "quiet"]


def test_kernel_cmdline_from_missing_file(tmp_path):
    with pytest.raises(NotFoundError) as info:
        KernelCmdline.from_file(tmp_path / "nope")
    assert info.value.path == tmp_path / "nope"


def test_loadavg_from_file(tmp_path):
    path = tmp_path / "loadavg"
    path.write_text("1.50 1.00 0.50 2/300 999\n")
    load = LoadAverage.from_file(path)
    assert (load.one, load.fifteen, load.latest_pid) == (1.5, 0.5, 999)