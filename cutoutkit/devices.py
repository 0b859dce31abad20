from __future__ import annotations

import torch


def select_device() -> str:
    """Select best available device: prefer MPS (Apple) > CUDA > CPU."""
    try:
        if torch.backends.mps.is_available():
            return "mps"
        if torch.cuda.is_available():
            return "cuda"
    except Exception:
        # Any probing issue -> fall back to CPU
        pass
    return "cpu"
