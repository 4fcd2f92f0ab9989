"""Scene module for world storage, materials and scene construction.

Components:
    intersection: Sphere storage and nearest-hit queries
    manager: Unified scene manager coordinating spheres and materials
    random_scene: Procedural sphere-field scene and the reference camera

Scene data is organized for efficient GPU access:
    - Structure-of-Arrays layout for sphere data
    - Contiguous material ID arrays
    - Unified material handles mapped to per-type registries
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .random_scene import (
    create_ground_scene,
    create_random_scene,
    create_reference_camera,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Scene factories
    "create_random_scene",
    "create_ground_scene",
    "create_reference_camera",
]
