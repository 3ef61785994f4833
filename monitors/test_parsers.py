import pytest

from monitors.parsers import (
    Reading,
    meminfo_fields,
    parse_cpu_temp,
    parse_cpu_util,
    parse_free,
    parse_gpu_temp,
    parse_mem_util,
    parse_meminfo,
    parse_sd_util,
    round2,
)


MPSTAT_FULL = """Linux 5.15.32-v7l+ (raspberrypi) \t2022-06-01 \t_armv7l_\t(4 CPU)

12:00:00     CPU    %usr   %nice    %sys %iowait    %irq   %soft  %steal  %guest  %gnice   %idle
12:00:05     all    1.50    0.00    0.75    0.25    0.00    0.00    0.00    0.00    0.00   97.50
12:00:05       0    2.00    0.00    1.00    0.00    0.00    0.00    0.00    0.00    0.00   97.00
12:00:05       1    1.00    0.00    0.50    0.00    0.00    0.00    0.00    0.00    0.00   98.00
12:00:05       2    3.00    0.00    2.00    0.00    0.00    0.00    0.00    0.00    0.00   95.00
12:00:05       3    0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00  100.00

Average:     CPU    %usr   %nice    %sys %iowait    %irq   %soft  %steal  %guest  %gnice   %idle
Average:     all    1.50    0.00    0.75    0.25    0.00    0.00    0.00    0.00    0.00   97.50
Average:       0    2.00    0.00    1.00    0.00    0.00    0.00    0.00    0.00    0.00   97.00
Average:       1    1.00    0.00    0.50    0.00    0.00    0.00    0.00    0.00    0.00   98.00
Average:       2    3.00    0.00    2.00    0.00    0.00    0.00    0.00    0.00    0.00   95.00
Average:       3    0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00    0.00  100.00
"""

# what `mpstat ... | sed -n 4,8p` leaves: data rows only, no header
MPSTAT_ROWS = """12:00:05     all    1,50    0,00    0,75    0,25    0,00    0,00    0,00    0,00    0,00   97,50
12:00:05       0    2,00    0,00    1,00    0,00    0,00    0,00    0,00    0,00    0,00   97,00
12:00:05       2    3,00    0,00    2,00    0,00    0,00    0,00    0,00    0,00    0,00   95,00
"""

FREE = """               total        used        free      shared  buff/cache   available
Mem:         3884136      971034     2167460       27424      771212     3333460
Swap:         102396           0      102396
"""

MEMINFO = """MemTotal:        1000000 kB
MemFree:          200000 kB
MemAvailable:     450000 kB
Buffers:           50000 kB
Cached:           150000 kB
SwapCached:            0 kB
SReclaimable:      50000 kB
HugePages_Total:       0
"""


class TestTemperature:
    def test_gpu(self):
        result = parse_gpu_temp("temp=45.6'C\n")
        assert result.ok
        assert result.readings == (Reading(318.75),)

    @pytest.mark.parametrize("text", ["", "45.6'C", "temp=hot'C", "temp='C", "temp=nan'C"])
    def test_gpu_malformed(self, text):
        result = parse_gpu_temp(text)
        assert not result.ok
        assert result.readings == ()

    def test_cpu(self):
        result = parse_cpu_temp("45600\n")
        assert result.readings == (Reading(318.75),)

    def test_cpu_below_zero(self):
        assert parse_cpu_temp("-5000").readings[0].value == 268.15

    @pytest.mark.parametrize("text", ["", "\n", "forty", "inf"])
    def test_cpu_malformed(self, text):
        result = parse_cpu_temp(text)
        assert not result.ok
        assert result.readings == ()


class TestCpuUtil:
    def test_full_output_uses_first_block_only(self):
        result = parse_cpu_util(MPSTAT_FULL)
        assert result.ok
        assert result.readings == (
            Reading(0.03, None),
            Reading(0.03, 0),
            Reading(0.02, 1),
            Reading(0.05, 2),
            Reading(0.0, 3),
        )
        assert result.rejected == ()

    def test_headerless_rows_with_decimal_comma(self):
        result = parse_cpu_util(MPSTAT_ROWS)
        assert [r.core for r in result.readings] == [None, 0, 2]
        assert [r.value for r in result.readings] == [0.03, 0.03, 0.05]

    def test_two_digit_core_is_a_core(self):
        header = "12:00:00 CPU %usr %nice %sys %iowait %irq %soft %steal %guest %gnice %idle\n"
        rows = "12:00:05 all 0 0 0 0 0 0 0 0 0 90.00\n12:00:05 12 0 0 0 0 0 0 0 0 0 80.00\n"
        result = parse_cpu_util(header + rows)
        assert result.readings == (Reading(0.1, None), Reading(0.2, 12))

    def test_without_aggregate_row(self):
        result = parse_cpu_util("12:00:05 0 0 0 0 0 0 0 0 0 0 97.00\n")
        assert not result.ok
        assert result.readings == ()

    def test_bad_lines_are_skipped(self):
        text = MPSTAT_ROWS + "12:00:05 3 0 0 0\n12:00:05 1 0 0 0 0 0 0 0 0 0 abc\n"
        result = parse_cpu_util(text)
        assert result.ok
        assert len(result.readings) == 3
        assert len(result.rejected) == 2

    def test_only_bad_lines(self):
        result = parse_cpu_util("all is broken\n")
        assert not result.ok
        assert result.readings == ()


class TestMemory:
    def test_free(self):
        result = parse_free(FREE)
        assert result.readings == (Reading(0.25),)

    def test_meminfo(self):
        assert parse_meminfo(MEMINFO).readings == (Reading(0.55),)

    def test_meminfo_optional_fields_default_to_zero(self):
        result = parse_meminfo("MemTotal: 1000 kB\nMemFree: 250 kB\n")
        assert result.readings == (Reading(0.75),)

    def test_source_switch(self):
        assert parse_mem_util(MEMINFO, "meminfo").readings == (Reading(0.55),)
        assert parse_mem_util(FREE).readings == (Reading(0.25),)

    @pytest.mark.parametrize("text", ["", "Swap: 1 2 3\n", "Mem: 0 0 0\n", "Mem: x 1\n", "Mem:\n"])
    def test_free_malformed(self, text):
        result = parse_free(text)
        assert not result.ok
        assert result.readings == ()

    @pytest.mark.parametrize("text", ["", "MemFree: 10 kB\n", "MemTotal: 0 kB\nMemFree: 0 kB\n"])
    def test_meminfo_malformed(self, text):
        result = parse_meminfo(text)
        assert not result.ok
        assert result.readings == ()

    def test_meminfo_fields(self):
        fields = meminfo_fields(MEMINFO)
        assert fields["MemTotal"] == 1000000
        assert fields["HugePages_Total"] == 0


class TestStorage:
    @pytest.mark.parametrize("text", ["42", "42\n", " 42%\n", "Use%\n 42%\n"])
    def test_percent(self, text):
        assert parse_sd_util(text).readings == (Reading(0.42),)

    @pytest.mark.parametrize("text", ["", "\n", "full", "142", "-1"])
    def test_malformed(self, text):
        result = parse_sd_util(text)
        assert not result.ok
        assert result.readings == ()


class TestRounding:
    @pytest.mark.parametrize("value,expected", [(0.125, 0.13), (0.025, 0.03), (0.124, 0.12), (318.74999999999994, 318.75)])
    def test_ties_round_up(self, value, expected):
        assert round2(value) == expected

    def test_cpu_util_tie(self):
        result = parse_cpu_util("12:00:05 all 0 0 0 0 0 0 0 0 0 87.50\n")
        assert result.readings == (Reading(0.13, None),)

    def test_free_tie(self):
        assert parse_free("Mem: 8000 1000 7000\n").readings == (Reading(0.13),)

    def test_meminfo_tie(self):
        assert parse_meminfo("MemTotal: 8000 kB\nMemFree: 7000 kB\n").readings == (Reading(0.13),)
