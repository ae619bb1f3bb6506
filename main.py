from time import sleep, perf_counter

from lazy import Lazy
from utils import Naturals

def expensive_transform(x):
    # Simulate a costly step so laziness is visible
    print(f"  computing f({x}) ...")
    sleep(0.2)
    return x * x

print("\n--- Demo: laziness (no work until iterated) ---")
pipeline = (
    Lazy.from_iterable(range(1, 10_000))
    .map(expensive_transform)
    .filter(lambda v: v % 2 == 0)
    .take(5)
)

print("Constructed pipeline. No output yet (nothing computed).")
print("\nIterating (should compute only what's needed for 5 items):")
t0 = perf_counter()
out = pipeline.to_list()
t1 = perf_counter()
print(f"Result: {out}")
print(f"Time: {t1 - t0:.2f}s\n")

print("--- Demo: unbounded source ---")
squares = Lazy(Naturals()).map(lambda n: n * n).take(10)
print(f"First ten squares: {squares.to_list()}")
print(f"Traversed again: {squares.to_list()}\n")

print("--- Demo: flattening and concatenation ---")
nested = Lazy([[], [1, 2, 3], [[4, 5], 6], 7])
print(f"flat():          {nested.flat().to_list()}")
print(f"flat(2):         {nested.flat(2).to_list()}")
print(f"concat(8, [9]):  {nested.flat(None).concat(8, [9]).to_list()}\n")

print("--- Demo: zip and sort ---")
print(f"zip:             {Lazy.zip(['a', 'b', 'c'], Naturals(1)).to_list()}")
print(f"default sort:    {Lazy([23, 2, 5, 3, 10, -200]).sort().to_list()}")
print(f"numeric sort:    {Lazy([23, 2, 5, 3, 10, -200]).sort(lambda a, b: a - b).to_list()}\n")

print("--- Demo: pagination ---")
for number, page in enumerate(Lazy(range(1, 12)).paginate(4), start=1):
    print(f"  page {number}: {page}")
