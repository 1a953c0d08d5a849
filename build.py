#!/usr/bin/env python3
"""
Local build script for netprobe

Freezes each executable (connectivity, portscan, net-grab, traceroute,
dns, http-test) into a standalone binary under dist/.

Usage:
    python build.py                 # Build every executable
    python build.py portscan dns    # Build only the named ones
    python build.py --clean         # Clean build artifacts first
"""

import argparse
import importlib
import os
import shutil
import subprocess
import sys
from pathlib import Path


# executable name -> click command in netprobe.cli
EXECUTABLES = {
    'connectivity': 'connectivity',
    'portscan': 'portscan',
    'net-grab': 'net_grab',
    'traceroute': 'traceroute',
    'dns': 'dns',
    'http-test': 'http_test',
}

ENTRY_DIR = Path('build') / 'entry'


# import name -> distribution providing it
REQUIRED_MODULES = {
    'PyInstaller': 'pyinstaller',
    'click': 'click',
    'rich': 'rich',
    'dns.resolver': 'dnspython',
    'httpx': 'httpx',
}


def clean():
    """Remove build/, dist/ and bytecode caches"""
    targets = [Path('build'), Path('dist')]
    targets += Path('netprobe').rglob('__pycache__')
    targets += Path('tests').rglob('__pycache__')

    for path in targets:
        if path.is_dir():
            print(f"Removing {path}")
            shutil.rmtree(path)


def check_dependencies():
    """Install the project with its build extra when any module is missing"""
    missing = []
    for module, distribution in REQUIRED_MODULES.items():
        try:
            importlib.import_module(module)
        except ImportError:
            missing.append(distribution)

    if not missing:
        print("✓ Build dependencies present")
        return

    print(f"✗ Missing: {', '.join(missing)}. Installing...")
    subprocess.run([sys.executable, '-m', 'pip', 'install', '-e', '.[build]'], check=True)


def write_entry(name: str, command: str) -> Path:
    """Launcher script PyInstaller can analyse"""
    ENTRY_DIR.mkdir(parents=True, exist_ok=True)
    path = ENTRY_DIR / f"{command}.py"
    path.write_text(
        f"from netprobe.cli import {command}\n\n"
        f"if __name__ == '__main__':\n"
        f"    {command}(prog_name={name!r})\n",
        encoding='utf-8'
    )
    return path


def build(name: str):
    """Build one executable"""
    print("\n" + "=" * 60)
    print(f"Building {name}...")
    print("=" * 60 + "\n")

    entry = write_entry(name, EXECUTABLES[name])
    result = subprocess.run(
        [sys.executable, '-m', 'PyInstaller', '--onefile', '--noconfirm',
         '--name', name, '--specpath', 'build', str(entry)],
        capture_output=False
    )

    if result.returncode != 0:
        print(f"\n✗ Build of {name} failed!")
        sys.exit(1)

    exe_path = Path('dist') / (f'{name}.exe' if sys.platform == 'win32' else name)

    if not exe_path.exists():
        print("\n✗ Output file not found!")
        sys.exit(1)

    size_mb = exe_path.stat().st_size / (1024 * 1024)
    print(f"✓ {exe_path.absolute()} ({size_mb:.1f} MB)")

    # Smoke test
    test_result = subprocess.run([str(exe_path), '--help'], capture_output=True, text=True)
    if test_result.returncode == 0:
        print(f"✓ {name} --help")
    else:
        print(f"✗ Test failed: {test_result.stderr}")


def main():
    parser = argparse.ArgumentParser(description='Build netprobe executables')
    parser.add_argument('names', nargs='*', help='Executables to build (default: all)')
    parser.add_argument('--clean', action='store_true', help='Clean build artifacts first')
    parser.add_argument('--clean-only', action='store_true', help='Only clean, do not build')
    args = parser.parse_args()

    os.chdir(Path(__file__).parent)

    if args.clean or args.clean_only:
        print("Cleaning build artifacts...")
        clean()
        if args.clean_only:
            print("Done.")
            return

    unknown = [n for n in args.names if n not in EXECUTABLES]
    if unknown:
        parser.error(f"unknown executable(s): {', '.join(unknown)}")

    check_dependencies()
    for name in args.names or EXECUTABLES:
        build(name)


if __name__ == '__main__':
    main()
