import functools
import time


def timeit(func):
    """Prints how long each call of `func` took."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            print(f"[TIMEIT] {func.__name__} executed in {time.perf_counter() - start:.4f}s")
    return wrapper
