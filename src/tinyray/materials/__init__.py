"""Materials module.

Components:
    phong: Phong material registry (ambient, diffuse, specular, exponent)

Materials are stored in global Taichi fields and addressed by integer id;
the shading evaluator reads them through the @ti.func accessors.
"""

from .phong import (
    MAX_PHONG_MATERIALS,
    PhongMaterial,
    add_phong_material,
    clear_phong_materials,
    get_ambient,
    get_diffuse,
    get_phong_material,
    get_phong_material_count,
    get_specular,
    get_specular_power,
)

__all__ = [
    "PhongMaterial",
    "MAX_PHONG_MATERIALS",
    "add_phong_material",
    "clear_phong_materials",
    "get_phong_material",
    "get_phong_material_count",
    "get_ambient",
    "get_diffuse",
    "get_specular",
    "get_specular_power",
]
