"""
Framework integration entry points.

Subpackages (imported on demand, each needs its framework installed):
- `tensorflow`: GraphDef file loading.
- `torch`: FX capture of ``nn.Module`` instances.
- `jax`: JAXPR capture of traced functions.
"""
