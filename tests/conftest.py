import os

# Use litellm's bundled model cost map instead of a background network fetch,
# which deadlocks imports during test collection when offline.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")
