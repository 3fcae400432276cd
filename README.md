# solong

A small top-down dungeon game over two levels. You walk through a walled tile
map, break open the jars that hold slimes and free them, stay clear of the
roaming eyes and the fire traps, and leave through the exit once every slime
is free. Outside a circle of light around you the map is darkened by fog;
each slime you free widens that circle.

## Installing

```
pip install .
```

The window is drawn with pygame, sprites are read with Pillow, and frames are
composed with numpy.

## Running

```
solong LEVEL1.ber LEVEL2.ber TEXTURES
```

The arguments are the first level map, the second level map and, last, the
texture manifest. Taking the exit of level one loads level two; taking the
exit of level two ends the game. If only one map is given, leaving level one
fails, because the next argument is the manifest and not a `.ber` file.

The program stops with `Error` and a short reason on standard error, and exit
status 1, when it gets fewer than two arguments, when a level file does not
end in `.ber` or cannot be opened for reading and writing, when the manifest
or a sprite cannot be read, or when a map is rejected. Each loaded map is
echoed to standard output, and every time the player enters a new tile a line
such as `up: [x:y] [128 64] pxl` is written to standard error.

## Map files

A `.ber` map is a rectangle of lines, all the same length, built from these
characters:

| Char | Meaning                              |
|------|--------------------------------------|
| `0`  | floor                                |
| `1`  | wall                                 |
| `P`  | player start (exactly one)           |
| `E`  | exit (exactly one)                   |
| `C`  | a jar holding a slime                |
| `O`  | a nest of ten roaming eyes           |
| `F`  | a fire trap (also blocks movement)   |

The map must be at least two columns by two lines, every tile the player can
reach must be closed off from the border by walls or traps, and the player
must be able to reach every jar and the exit. Maps larger than 30000 pixels
(tiles are 64 pixels) in either direction are refused.

Example:

```
1111111
1P0C0E1
1000001
1111111
```

## Texture manifest

The manifest is a text file of exactly 119 lines. Each line is a one-character
marker followed by a sprite path: `.` begins a new image group, `-` begins a
new animation within the group, and any other marker adds a frame. Keywords in
the line (`floor`, `wall`, `deco`, `exit`, `slime`, `player`, `ennemies`,
`trap`, `game` and their variants such as `haut`, `bas`, `gauche`, `droite`,
`attack_`, `counter_`, `minimap`, `countdown`) decide how many frames each
animation has. Sprites may be in any format Pillow reads; fully transparent
pixels are not drawn.

## Controls

| Input                        | Action                                          |
|------------------------------|-------------------------------------------------|
| `W` `A` `S` `D`              | move                                            |
| left mouse button            | attack: open nearby jars, kill stunned eyes     |
| `E`                          | free the slime of an opened jar, or use the exit once it is open |
| right mouse button (hold)    | counter: stun eyes in reach, walk at half speed |
| `Shift` + left mouse         | send freed slimes towards the pointer           |
| right mouse near a sent slime| swap onto that slime                            |
| `M` (hold)                   | show the minimap                                |
| `Esc`                        | quit (status 0)                                 |
| closing the window           | quit (status 1)                                 |

Freed slimes trail behind you. The exit opens once every slime is free.
Attack and counter each have a cooldown shown as a bar on the left of the
screen, and your step count is drawn above you. Touching an eye, or standing
in front of a fire trap while it burns, ends your run: a death screen is
shown and only `Esc` or closing the window remain.

## Using it as a library

The modules can drive the game without a window:

- `solong.game.prepare_level(argv, level, loader)` reads a map and the
  manifest and returns a `solong.state.GameState`; `loader` turns a sprite
  path into a `solong.image.Image` (by default `solong.image.load_image`).
- `solong.game.tick(state)` advances one loop iteration and composes the
  window image in `state.game`; it returns a `solong.player.Outcome`
  (`CONTINUE`, `QUIT`, `NEXT_LEVEL` or `VICTORY`).
- `solong.player.press_key`, `release_key`, `press_button` and
  `release_button` feed input into the state.
- `solong.mapfile.parse_map(text)` checks map text and returns a
  `ParsedMap`; `build_cells`, `flood_fill` and `format_map` work on the
  linked grid of `solong.state.Cell` objects.
- `solong.textures.parse_manifest(lines)` and `build_tileset(manifest, loader)`
  read a manifest and load its tiles.

Errors are raised as `solong.state.GameError`, with `MapError` and
`TextureError` for map and texture problems.

## What it does not do

There is no sound, no saving of progress, and no level editor; the game is
exactly the two levels named on the command line.

## Tests

```
pip install .[test]
pytest
```