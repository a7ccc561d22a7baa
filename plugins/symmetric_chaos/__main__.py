"""
Symmetric Chaos Viewer - Entry Point

Usage:
    python -m symmetric_chaos [preset] [--map M] [--mode MODE] [--size WxH]
                              [--dpr F] [--speed S] [--load FILE] [--snap N]

Examples:
    python -m symmetric_chaos
    python -m symmetric_chaos roses --mode histogram
    python -m symmetric_chaos --map icon --size 1200x1200
    python -m symmetric_chaos --load quilts.json --snap 300
    python -m symmetric_chaos all --snap 200

Maps:
    ifs     - Symmetric iterated function system (Zn / Dn)
    quilt   - Square quilt, periodic tiling of the unit torus
    icon    - Symmetric icon, complex polynomial map

Use --list to see all available presets.
"""

import os
import sys

from .maps import MAP_ORDER, get_map_class
from .accumulators import RENDER_MODES
from .presets import PRESET_ORDER, MAP_DEFAULT_PRESET, list_presets
from .preset_files import read_preset_file, PresetError
from .simulator import ChaosSimulator


def screenshots_dir():
    path = os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "screenshots"
    )
    os.makedirs(path, exist_ok=True)
    return path


def snap(presets, width, height, ticks, dpr=1.0, render_mode=None, speed=50, seed=None):
    """Headless mode: run N ticks per preset, save a PNG, exit.

    presets is a list of (label, preset) pairs where preset is a built-in
    key or a parameter dict loaded from a file.
    """
    out_dir = screenshots_dir()
    for label, preset in presets:
        sim = ChaosSimulator(
            preset_key=preset if isinstance(preset, str) else None,
            map_name=preset.get("map", "ifs") if isinstance(preset, dict) else "ifs",
            width=width, height=height, dpr=dpr,
            render_mode=render_mode, speed=speed, seed=seed,
        )
        if isinstance(preset, dict):
            sim.apply_preset(preset)

        print(f"  {label}: running {ticks} ticks...", end="", flush=True)
        sim.run_frames(ticks)

        img = sim.snapshot()
        path = os.path.join(out_dir, f"sc_{label}.png")
        img.save(path)
        img.save(os.path.join(out_dir, "latest.png"))
        print(f" {sim.points:,} points, saved: {path}")
        sim.close()


def _print_presets():
    print("\nAvailable presets:")
    for map_name in MAP_ORDER:
        print(f"\n  [{map_name}] {get_map_class(map_name).map_label}")
        for key, name, desc in list_presets(map_name):
            print(f"    {key:22s} {name:22s} {desc}")
    print()


def _file_label(path, index, preset):
    base = os.path.splitext(os.path.basename(path))[0]
    name = preset.get("name")
    if name:
        slug = "".join(c if c.isalnum() else "_" for c in name.lower()).strip("_")
        return f"{base}_{slug}"
    return f"{base}_{index}"


def main():
    preset = None
    map_name = None
    render_mode = None
    win_w, win_h = 800, 800
    dpr = 1.0
    speed = 50
    load_path = None
    snap_ticks = 0
    seed = None

    args = sys.argv[1:]
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--map" and i + 1 < len(args):
            map_name = args[i + 1]
            if map_name not in MAP_ORDER:
                print(f"Unknown map: {map_name} (choose from {', '.join(MAP_ORDER)})")
                return 2
            i += 2
        elif arg == "--mode" and i + 1 < len(args):
            render_mode = args[i + 1]
            if render_mode not in RENDER_MODES:
                print(f"Unknown mode: {render_mode} (choose from {', '.join(RENDER_MODES)})")
                return 2
            i += 2
        elif arg == "--size" and i + 1 < len(args):
            parts = args[i + 1].split("x")
            win_w = int(parts[0])
            win_h = int(parts[1]) if len(parts) > 1 else win_w
            i += 2
        elif arg == "--dpr" and i + 1 < len(args):
            dpr = float(args[i + 1])
            i += 2
        elif arg == "--speed" and i + 1 < len(args):
            speed = float(args[i + 1])
            i += 2
        elif arg == "--seed" and i + 1 < len(args):
            seed = int(args[i + 1])
            i += 2
        elif arg == "--load" and i + 1 < len(args):
            load_path = args[i + 1]
            i += 2
        elif arg == "--snap" and i + 1 < len(args):
            snap_ticks = int(args[i + 1])
            i += 2
        elif arg == "--list":
            _print_presets()
            return 0
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        elif arg in PRESET_ORDER or arg == "all":
            preset = arg
            i += 1
        else:
            print(f"Unknown argument: {arg}")
            print("Use --list to see available presets")
            return 2

    if preset is None:
        preset = MAP_DEFAULT_PRESET[map_name or "ifs"]

    if snap_ticks > 0:
        if load_path:
            try:
                loaded = read_preset_file(load_path)
            except PresetError as e:
                print(f"[SC] Rejected preset file {load_path}: {e}")
                return 1
            targets = [(_file_label(load_path, n, p), p) for n, p in enumerate(loaded)]
        elif preset == "all":
            targets = [(key, key) for key in PRESET_ORDER]
        else:
            targets = [(preset, preset)]
        print(f"Headless snap mode: {len(targets)} preset(s) @ {win_w}x{win_h}, "
              f"{snap_ticks} ticks")
        snap(targets, win_w, win_h, snap_ticks, dpr=dpr,
             render_mode=render_mode, speed=speed, seed=seed)
        return 0

    if preset == "all":
        preset = PRESET_ORDER[0]

    # pygame is only needed for the interactive window
    from .viewer import Viewer

    print("Starting Symmetric Chaos Viewer")
    print(f"  Preset: {preset}")
    print(f"  Window: {win_w}x{win_h} (dpr {dpr})")
    if load_path:
        print(f"  Loading: {load_path}")
    print()

    viewer = Viewer(
        width=win_w,
        height=win_h,
        start_preset=preset,
        render_mode=render_mode,
        speed=speed,
        dpr=dpr,
        preset_file=load_path,
    )
    viewer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
