"""Material and Shader Usage Tests.

Tests for unused materials, materials with a missing shader, the shader
breakdown and unused project shaders.
"""

import unittest

from optihub.core.models.entity import EntityKind, create_asset, create_scene
from optihub.domain.graph.usage import MISSING_SHADER, MaterialUsage
from optihub.infrastructure.content.memory import InMemoryContentDatabase


def build_material_project() -> InMemoryContentDatabase:
    """Scene Main -> prefab Hero -> mat_hero, mat_broken; Main -> mat_floor.

    mat_spare is referenced by nothing. Shader paths and names cover the
    built-in and outside-project exclusions.
    """
    db = InMemoryContentDatabase()
    db.add_entity(create_scene("s_main", "Main"))
    db.add_entity(create_asset("p_hero", EntityKind.PREFAB, "Hero", "Assets/Prefabs/Hero.prefab"))

    shaders = [
        ("sh_lit", "Custom/Lit", "Assets/Shaders/Lit.shader"),
        ("sh_unlit", "Custom/Unlit", "Assets/Shaders/Unlit.shader"),
        ("sh_toon", "Custom/Toon", "Assets/Shaders/Toon.shader"),
        ("sh_blit", "Hidden/Blit", "Assets/Shaders/Blit.shader"),
        ("sh_standard", "Standard (Specular)", "Assets/Shaders/Std.shader"),
        ("sh_package", "Vendor/Water", "Packages/vendor/Water.shader"),
    ]
    for shader_id, name, path in shaders:
        db.add_entity(create_asset(shader_id, EntityKind.SHADER, name, path))

    for material_id in ("mat_hero", "mat_floor", "mat_broken", "mat_spare"):
        db.add_entity(create_asset(material_id, EntityKind.MATERIAL, material_id, f"Assets/Materials/{material_id}.mat"))

    edges = [
        ("s_main", "p_hero"), ("s_main", "mat_floor"),
        ("p_hero", "mat_hero"), ("p_hero", "mat_broken"),
        ("mat_hero", "sh_lit"), ("mat_floor", "sh_lit"),
        ("mat_spare", "sh_unlit"),
    ]
    for source, target in edges:
        db.add_dependency(source, target)
    return db


class MaterialUsageTest(unittest.TestCase):
    """Test material and shader usage over a small scene graph."""

    def setUp(self) -> None:
        self.db = build_material_project()
        self.usage = MaterialUsage(self.db)

    def test_unused_materials(self) -> None:
        """Test that materials reached through a prefab count as used."""
        self.assertEqual([m.id for m in self.usage.unused_materials()], ["mat_spare"])

    def test_materials_missing_shader(self) -> None:
        self.assertEqual([m.id for m in self.usage.materials_missing_shader()], ["mat_broken"])

    def test_materials_by_shader(self) -> None:
        self.assertEqual(
            self.usage.materials_by_shader(),
            {
                "Custom/Lit": ("mat_hero", "mat_floor"),
                MISSING_SHADER: ("mat_broken",),
                "Custom/Unlit": ("mat_spare",),
            },
        )

    def test_unused_shaders_skip_builtin_and_external(self) -> None:
        """Test that only project shaders outside the built-in families are reported."""
        self.assertEqual([s.id for s in self.usage.unused_shaders()], ["sh_toon"])

    def test_shader_of(self) -> None:
        self.assertEqual(self.usage.shader_of(self.db.get("mat_hero")).id, "sh_lit")
        self.assertIsNone(self.usage.shader_of(self.db.get("mat_broken")))

    def test_removing_reference_makes_material_unused(self) -> None:
        self.db.delete_entity("p_hero")

        unused = [m.id for m in MaterialUsage(self.db).unused_materials()]

        self.assertEqual(unused, ["mat_hero", "mat_broken", "mat_spare"])


if __name__ == "__main__":
    unittest.main()
