#Docstring for the package
"""
Payroll Merge

This package contains the modules for:

- Loading the payroll (nuevo / base / efectivo) and pension (quincenal /
  base pensiones / modalidad) Excel exports
- Normalizing records and building identity indexes
- Reconciling a period extract against its base roster (altas, bajas,
  merged roster, no-bank roster)
- Splitting the merged roster into bank buckets and building bank payment files

Subpackages:
- core
- engines
- visualization
- outputs

"""

from . import core, engines, visualization, outputs
__all__ = [
    "core",
    "engines",
    "visualization",
    "outputs",
]
