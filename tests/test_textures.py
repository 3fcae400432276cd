import pytest

from solong.image import new_image
from solong.state import TextureError
from solong.textures import (
    MANIFEST_LINES,
    TextureManifest,
    build_tileset,
    load_manifest,
    parse_manifest,
)


def _floor_manifest_lines():
    first = ".textures/floor0.xpm\n"
    rest = [f" textures/floor{n}.xpm\n" for n in range(1, MANIFEST_LINES)]
    return [first, *rest]


def test_category_marker_counts_image_and_variant():
    manifest = TextureManifest()
    manifest.add_line(".textures/floor_a.xpm\n")
    assert manifest.image_count == 1
    assert manifest.variants[0] == 1
    assert manifest.frames[0] == 1


def test_wall_lines_sorted_into_slots():
    manifest = TextureManifest()
    lines = ["-wall_haut_0.xpm\n", " wall_haut_1.xpm\n", "-wall_corner.xpm\n"]
    for line in lines:
        manifest.add_line(line)
    assert manifest.frames[1] == 2
    assert manifest.frames[5] == 1
    assert manifest.variants[1] == sum(line.startswith("-") for line in lines)
    assert manifest.image_count == 0


def test_player_attack_variants_are_distinct():
    manifest = TextureManifest()
    manifest.add_line(" player_attack_0.xpm\n")
    manifest.add_line(" player_attackr_0.xpm\n")
    assert manifest.frames[15] == 1
    assert manifest.frames[16] == 1


def test_unknown_line_only_adds_path():
    manifest = TextureManifest()
    manifest.add_line(" textures/other.xpm\n")
    assert manifest.frames == TextureManifest().frames
    assert manifest.variants == TextureManifest().variants
    assert manifest.paths == ["textures/other.xpm"]


def test_paths_drop_marker_and_blank_entries():
    manifest = TextureManifest()
    for line in [".a/floor.xpm\n", "-b/wall.xpm\n", "\n", " c/exit.xpm"]:
        manifest.add_line(line)
    assert manifest.paths == ["a/floor.xpm", "b/wall.xpm", "c/exit.xpm"]
    assert manifest.line_count == 4


def test_parse_manifest_requires_exact_line_count():
    with pytest.raises(TextureError):
        parse_manifest(_floor_manifest_lines()[:-1])


def test_parse_manifest_rejects_empty():
    with pytest.raises(TextureError):
        parse_manifest([])


def test_build_tileset_loads_in_manifest_order():
    manifest = parse_manifest(_floor_manifest_lines())
    requested = []

    def loader(path):
        requested.append(path)
        return new_image(1, 1)

    tiles = build_tileset(manifest, loader)
    assert len(tiles) == manifest.image_count
    assert len(tiles[0]) == manifest.variants[0]
    assert len(tiles[0][0]) == MANIFEST_LINES
    assert requested == manifest.paths


def test_build_tileset_wraps_loader_failure():
    manifest = parse_manifest(_floor_manifest_lines())

    def loader(path):
        raise OSError(path)

    with pytest.raises(TextureError):
        build_tileset(manifest, loader)


def test_build_tileset_missing_paths():
    manifest = TextureManifest()
    manifest.add_line(".floor.xpm\n")
    manifest.frames[0] = 3
    with pytest.raises(TextureError):
        build_tileset(manifest, lambda path: new_image(1, 1))


def test_load_manifest_from_file(tmp_path):
    path = tmp_path / "textures.txt"
    path.write_text("".join(_floor_manifest_lines()))
    manifest = load_manifest(path)
    assert manifest.line_count == MANIFEST_LINES
    assert manifest.paths[0] == "textures/floor0.xpm"


def test_load_manifest_missing_file(tmp_path):
    with pytest.raises(TextureError):
        load_manifest(tmp_path / "absent.txt")


def test_load_manifest_empty_file(tmp_path):
    path = tmp_path / "empty.txt"
    path.write_text("")
    with pytest.raises(TextureError):
        load_manifest(path)