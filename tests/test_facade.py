"""Analysis Facade Tests.

Tests for TTL-cached named analyses, passive reads, refreshes and cache
invalidation after apply phases.
"""

import threading
import unittest

from optihub.app.config import CacheConfig, OptiHubConfig
from optihub.core.models.entity import EntityKind, create_asset, create_audio_clip, create_texture
from optihub.core.models.results import DuplicateScanResult, OwnershipClassification
from optihub.core.progress import CancellationToken
from optihub.domain.analysis.facade import AnalysisFacade

from project_fixtures import FakeClock, build_audio_project, build_ownership_project


class FacadeCachingTest(unittest.TestCase):
    """Test cache hits, expiry and refresh semantics."""

    def setUp(self) -> None:
        self.clock = FakeClock()
        self.db = build_ownership_project()
        self.facade = AnalysisFacade(self.db, clock=self.clock)

    def test_recompute_only_after_ttl(self) -> None:
        """Test the 0 / 4 / 6 minute scenario with the default five minute TTL."""
        first = self.facade.get("AllTextureInfos")
        self.db.add_entity(create_texture("tex_new", "new"))

        self.clock.advance(minutes=4)
        self.assertIs(self.facade.get("AllTextureInfos"), first)

        self.clock.advance(minutes=2)
        refreshed = self.facade.get("AllTextureInfos")
        self.assertIsNot(refreshed, first)
        self.assertIn("tex_new", [t.id for t in refreshed])

    def test_force_refresh_recomputes(self) -> None:
        first = self.facade.get("AllTextureInfos")
        self.db.add_entity(create_texture("tex_new", "new"))

        refreshed = self.facade.get("AllTextureInfos", force_refresh=True)

        self.assertEqual(len(refreshed), len(first) + 1)
        self.assertIs(self.facade.peek("AllTextureInfos"), refreshed)

    def test_peek_never_computes(self) -> None:
        self.assertIsNone(self.facade.peek("OwnershipClassification"))

        value = self.facade.get("OwnershipClassification")
        self.assertIs(self.facade.peek("OwnershipClassification"), value)

        self.clock.advance(minutes=6)
        self.assertIsNone(self.facade.peek("OwnershipClassification"))

    def test_unknown_name_raises(self) -> None:
        with self.assertRaises(KeyError):
            self.facade.get("EverythingElse")
        with self.assertRaises(KeyError):
            self.facade.peek("EverythingElse")

    def test_analyses_do_not_share_entries(self) -> None:
        """Test that one cached analysis never feeds another."""
        self.facade.get("UncompressedTextures")
        self.db.update_settings("tex_a", {"compression": "uncompressed"})

        self.assertEqual(len(self.facade.get("UncompressedTextures")), 0)
        self.assertIn("tex_a", [t.id for t in self.facade.get("AllTextureInfos") if t.get_setting("compression") == "uncompressed"])

    def test_configured_ttl(self) -> None:
        facade = AnalysisFacade(self.db, OptiHubConfig(cache=CacheConfig(ttl_seconds=30)), clock=self.clock)
        facade.get("AllTextureInfos")

        self.clock.advance(seconds=31)
        self.assertIsNone(facade.peek("AllTextureInfos"))

    def test_clear_cache(self) -> None:
        for name in self.facade.queries:
            self.facade.get(name)

        self.facade.clear_cache()

        self.assertTrue(all(self.facade.peek(name) is None for name in self.facade.queries))

    def test_cached_read_does_not_wait_for_writer(self) -> None:
        """Test that a valid entry is served while another thread holds the writer lock."""
        first = self.facade.get("AllTextureInfos")
        held = threading.Event()
        release = threading.Event()

        def writer() -> None:
            with self.facade._lock:
                held.set()
                release.wait(5)

        writer_thread = threading.Thread(target=writer)
        writer_thread.start()
        held.wait(5)
        results = []
        reader = threading.Thread(target=lambda: results.append(self.facade.get("AllTextureInfos")))
        try:
            reader.start()
            reader.join(timeout=2)
            self.assertFalse(reader.is_alive())
            self.assertIs(results[0], first)
        finally:
            release.set()
            writer_thread.join()
            reader.join()

    def test_cancelled_result_not_cached(self) -> None:
        token = CancellationToken()
        token.cancel()

        result = self.facade.get("OwnershipClassification", token=token)

        self.assertFalse(result.complete)
        self.assertIsNone(self.facade.peek("OwnershipClassification"))


class FacadeQueriesTest(unittest.TestCase):
    """Test that every named analysis produces its result type."""

    def setUp(self) -> None:
        self.db = build_ownership_project()
        self.db.add_entity(create_asset("mesh_hi", EntityKind.MESH, "hi", settings={"mesh_compression": "high"}))
        self.db.add_entity(create_asset("font_ui", EntityKind.FONT, "ui", settings={"font_texture_case": "custom_set"}))
        self.db.add_entity(create_texture("tex_npot", "npot", width=300, height=200))
        self.db.add_entity(create_texture("tex_packed", "packed", width=300, height=200))
        self.db.add_entity(create_asset("atlas_ui", EntityKind.ATLAS, "ui"))
        self.db.add_dependency("atlas_ui", "tex_packed")
        self.facade = AnalysisFacade(self.db)

    def test_all_queries_available(self) -> None:
        self.assertEqual(len(self.facade.queries), 16)
        for name in self.facade.queries:
            with self.subTest(name=name):
                self.assertIsNotNone(self.facade.get(name))

    def test_textures_not_in_atlas(self) -> None:
        flagged = [t.id for t in self.facade.get("TexturesNotInAtlas")]

        self.assertEqual(flagged, ["tex_npot"])

    def test_breakdowns(self) -> None:
        self.assertEqual(self.facade.get("MeshesByCompression")["high"], ("mesh_hi",))
        self.assertEqual(self.facade.get("FontsByCompression")["compressed"], ("font_ui",))
        self.assertIsInstance(self.facade.get("OwnershipClassification"), OwnershipClassification)
        self.assertIsInstance(self.facade.get("DuplicateAudio"), DuplicateScanResult)

    def test_material_and_shader_queries(self) -> None:
        self.db.add_entity(create_asset("sh_lit", EntityKind.SHADER, "Custom/Lit", "Assets/Shaders/Lit.shader"))
        self.db.add_entity(create_asset("sh_toon", EntityKind.SHADER, "Custom/Toon", "Assets/Shaders/Toon.shader"))
        self.db.add_entity(create_asset("mat_used", EntityKind.MATERIAL, "used"))
        self.db.add_entity(create_asset("mat_spare", EntityKind.MATERIAL, "spare"))
        self.db.add_dependency("s1", "mat_used")
        self.db.add_dependency("mat_used", "sh_lit")

        self.assertEqual([m.id for m in self.facade.get("UnusedMaterials")], ["mat_spare"])
        self.assertEqual([m.id for m in self.facade.get("MaterialsMissingShader")], ["mat_spare"])
        self.assertEqual(self.facade.get("MaterialsByShader")["Custom/Lit"], ("mat_used",))
        self.assertEqual([s.id for s in self.facade.get("UnusedShaders")], ["sh_toon"])


class FacadeApplyTest(unittest.TestCase):
    """Test apply phases and the cache entries they invalidate."""

    def test_regroup_invalidates_ownership(self) -> None:
        facade = AnalysisFacade(build_ownership_project())
        before = facade.get("OwnershipClassification")
        facade.get("AllTextureInfos")

        report = facade.regroup()

        self.assertEqual(len(report.items), before.total_misplaced)
        self.assertIsNone(facade.peek("OwnershipClassification"))
        self.assertIsNotNone(facade.peek("AllTextureInfos"))
        self.assertEqual(facade.get("OwnershipClassification").total_misplaced, 0)

    def test_move_misplaced_textures(self) -> None:
        facade = AnalysisFacade(build_ownership_project())

        report = facade.move_misplaced_textures()

        self.assertTrue(report.ok)
        self.assertEqual(facade.get("MisplacedAtlasTextures").total_misplaced, 0)

    def test_texture_fixes(self) -> None:
        db = build_ownership_project()
        db.update_settings("tex_a", {"compression": "uncompressed", "mipmaps": True})
        facade = AnalysisFacade(db)
        self.assertEqual(len(facade.get("UncompressedTextures")), 1)

        facade.fix_texture_compression()
        facade.disable_mipmaps()

        self.assertEqual(facade.get("UncompressedTextures"), ())
        self.assertEqual(facade.get("CompressedNotCrunchedTextures"), ())
        self.assertEqual(facade.get("TexturesWithMipMap"), ())

    def test_fix_audio_compression(self) -> None:
        db = build_audio_project()
        db.add_entity(create_audio_clip("loud", "loud", samples=4, settings={"normalize": True}))
        facade = AnalysisFacade(db)
        self.assertEqual([c.id for c in facade.get("AudioWrongCompression")], ["loud"])

        report = facade.fix_audio_compression()

        self.assertTrue(report.ok)
        self.assertEqual(facade.get("AudioWrongCompression"), ())

    def test_delete_duplicates(self) -> None:
        facade = AnalysisFacade(build_audio_project())
        self.assertEqual(facade.get("DuplicateAudio").redundant_count, 1)

        report = facade.delete_duplicates()

        self.assertTrue(report.ok)
        self.assertIsNone(facade.peek("DuplicateAudio"))
        self.assertEqual(facade.get("DuplicateAudio").groups, ())
        self.assertEqual(len(facade.get("AllAudioInfos")), 3)


if __name__ == "__main__":
    unittest.main()
