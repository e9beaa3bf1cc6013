"""Formal invariants of the lodview core.

This file documents what each component MUST guarantee. Use it as a
reviewer anchor and system reference.
"""

INVARIANTS = {
    "sampling": [
        "target_points >= 2, otherwise ContractViolation",
        "len(series) <= target_points returns the input unchanged",
        "Reduced output keeps the first and last source elements (except NoSampling)",
        "Reduced output length <= max(target_points, 2)",
        "Reducers are pure: same input, same output, no shared state",
    ],

    "spatial": [
        "Grid geometry is fixed at construction (bounds, grid_size)",
        "Out-of-bounds points are clamped into edge cells, never rejected",
        "query() returns exactly the elements within Euclidean radius",
        "Queries before the index is adopted return no elements",
    ],

    "engine": [
        "LOD cache entries always belong to the current data and strategy",
        "set_data() and strategy changes invalidate the whole cache",
        "Background results are adopted only by the owning thread",
        "Metrics accumulate on every query until reset()",
        "Querying without data returns an empty series",
    ],

    "streaming": [
        "len(window) <= window_size at all times",
        "flush() is the only path from pending buffer to window",
        "Empty flush leaves window and data_rate untouched",
        "clear() empties pending, window and data_rate together",
        "No timer flush starts after stop() returns",
    ],
}

# Which components hand work to background threads
BACKGROUND_WORK = {
    "sampling": "NONE",
    "spatial": "OPTIONAL",   # builder thread
    "engine": "OPTIONAL",    # eager LOD precompute
    "streaming": "REQUIRED", # flush timer while active
}
