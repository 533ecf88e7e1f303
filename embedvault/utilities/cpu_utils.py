# embedvault/utilities/cpu_utils.py
import os
import platform
from typing import Optional

import psutil
import torch

AVX2_CAPABILITIES = ("AVX2", "AVX512")
ARM64_MACHINES = ("arm64", "aarch64")

def get_cpu_capability() -> str:
    """SIMD level reported by torch's CPU dispatcher (e.g. 'AVX2', 'AVX512', 'DEFAULT')."""
    return torch.backends.cpu.get_cpu_capability()

def has_avx2() -> bool:
    return get_cpu_capability() in AVX2_CAPABILITIES

def has_neon() -> bool:
    return platform.machine().lower() in ARM64_MACHINES

def detect_vector_extension() -> Optional[str]:
    """Return 'avx2', 'neon' or None for the running CPU."""
    if has_avx2():
        return "avx2"
    if has_neon():
        return "neon"
    return None

def available_workers() -> int:
    """Number of logical execution units available to this process."""
    return psutil.cpu_count(logical=True) or os.cpu_count() or 1

def get_cpu_info():
    """Get CPU information relevant to kernel selection."""
    return {
        "machine": platform.machine(),
        "processor": platform.processor(),
        "capability": get_cpu_capability(),
        "vector_extension": detect_vector_extension(),
        "logical_cores": psutil.cpu_count(logical=True),
        "physical_cores": psutil.cpu_count(logical=False),
    }

def print_cpu_info():
    """Print CPU information for diagnostics."""
    info = get_cpu_info()
    print(f"  CPU: {info['processor'] or info['machine']} ({info['machine']})")
    print(f"    SIMD capability: {info['capability']}")
    print(f"    Vector extension: {info['vector_extension'] or 'none'}")
    print(f"    Cores: {info['physical_cores']} physical, {info['logical_cores']} logical")
