"""Example bench suites.

Each suite shares a define name table: the implicit names first, then the
suite's own defines. Bodies report through ``cfg.recorder``; with no block
device plugged in the io counters read as zero, so these examples report
computed results instead.
"""

from benchrun.implicit import IMPLICIT_DEFINE_NAMES
from benchrun.models import BenchCase, BenchFlags, BenchSuite, Define, define_row
from benchrun.prng import bench_permutation, bench_prng
from benchrun.trace import trace

SORT_NAMES = IMPLICIT_DEFINE_NAMES + ("N", "SEED")
LAYOUT_NAMES = IMPLICIT_DEFINE_NAMES + ("FILE_SIZE", "CHUNK_SIZE")


def bench_shuffle(cfg):
    n = cfg.defines.N
    order = bench_permutation(cfg.defines.SEED, n)
    cfg.recorder.start("shuffle", 0, n)
    displaced = sum(1 for i, x in enumerate(order) if i != x)
    cfg.recorder.stop("shuffle")
    cfg.recorder.result("displaced", 0, n, displaced)


def bench_prng_fill(cfg):
    n = cfg.defines.N
    state = cfg.defines.SEED
    trace("prng fill n=%d seed=%d", n, state)
    total = 0
    for _ in range(n):
        value, state = bench_prng(state)
        total += value & 0xFF
    cfg.recorder.fresult("mean_byte", 0, n, total / n if n else 0.0)


def bench_chunk_blocks(cfg):
    file_size = cfg.defines.FILE_SIZE
    chunk_size = cfg.defines.CHUNK_SIZE
    blocks = 0
    for offset in range(0, file_size, chunk_size):
        # blocks touched by this chunk
        first = offset // cfg.block_size
        last = (min(offset + chunk_size, file_size) - 1) // cfg.block_size
        blocks += last - first + 1
    cfg.recorder.result("blocks", 0, file_size, blocks)


SORT_SUITE = BenchSuite(
    name="bench_sort",
    path="benches/bench_sort.toml",
    define_names=SORT_NAMES,
    cases=(
        BenchCase(
            name="bench_sort_shuffle",
            run=bench_shuffle,
            path="benches/bench_sort.toml:4",
            defines=(
                define_row(SORT_NAMES, {"N": [8, 64], "SEED": range(4)}),
            ),
        ),
        BenchCase(
            name="bench_sort_prng",
            run=bench_prng_fill,
            path="benches/bench_sort.toml:12",
            defines=(
                define_row(SORT_NAMES, {"N": 1024, "SEED": [0, 1]}),
                define_row(SORT_NAMES, {"N": 1024, "SEED": [1, 2]}),
            ),
        ),
    ),
)

LAYOUT_SUITE = BenchSuite(
    name="bench_layout",
    path="benches/bench_layout.toml",
    define_names=LAYOUT_NAMES,
    flags=BenchFlags.INTERNAL,
    cases=(
        BenchCase(
            name="bench_layout_chunks",
            run=bench_chunk_blocks,
            path="benches/bench_layout.toml:3",
            defines=(
                define_row(
                    LAYOUT_NAMES,
                    {
                        "BLOCK_SIZE": [512, 4096],
                        "FILE_SIZE": Define(lambda d, i: 4 * d.BLOCK_SIZE),
                        "CHUNK_SIZE": [1, 64, 4096],
                    },
                ),
            ),
            if_=lambda d: d.CHUNK_SIZE <= d.FILE_SIZE,
        ),
    ),
)

SUITES = [SORT_SUITE, LAYOUT_SUITE]
