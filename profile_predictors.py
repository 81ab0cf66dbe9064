import random
import time
from rpsls_arena.engine import MOVES
from rpsls_arena.predictors import FrequencyPredictor, SequencePredictor

HISTORY_LENGTHS = [10, 100, 1000]
CALLS = 200


def profile_predictors():
    predictors = [FrequencyPredictor()] + [SequencePredictor(order=n) for n in range(1, 6)]
    print(f"Profiling {len(predictors)} predictors...")
    rng = random.Random(0)

    for length in HISTORY_LENGTHS:
        history = tuple(rng.choice(MOVES) for _ in range(length))
        print(f"\n--- History length {length} (avg ms per prediction) ---")
        for predictor in predictors:
            label = predictor.name if not hasattr(predictor, "order") else f"{predictor.name} (order {predictor.order})"
            start = time.perf_counter()
            for _ in range(CALLS):
                predictor.predict(history)
            avg = (time.perf_counter() - start) * 1000 / CALLS
            print(f"{label:<22}: {avg:.4f} ms")

if __name__ == "__main__":
    profile_predictors()
