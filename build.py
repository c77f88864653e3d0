import os
import subprocess
import sys
from PIL import Image

APP_NAME = "CreditDesk"
ENTRY_POINT = os.path.join("creditdesk", "__main__.py")


def prepare_icon(icon_png="resources/icon.png", icon_ico="resources/icon.ico"):
    """Convert the PNG app icon to ICO. Returns the ICO path or None."""
    if not os.path.exists(icon_png):
        print(f"Warning: {icon_png} not found, building without an icon")
        return None

    try:
        img = Image.open(icon_png)
        img.save(icon_ico, format='ICO', sizes=[(256, 256), (64, 64), (32, 32)])
        print(f"Converted {icon_png} to {icon_ico}")
        return icon_ico
    except OSError as e:
        print(f"Warning: Could not convert icon: {e}")
        return None


def nuitka_command(icon_ico=None):
    cmd = [
        sys.executable, "-m", "nuitka",
        "--standalone",
        "--enable-plugin=pyqt6",           # QtWebEngine is pulled in by the plugin
        "--windows-console-mode=disable",
        "--lto=yes",
        "--deployment",
        "--show-progress",
        "--output-dir=build",
        f"--output-filename={APP_NAME}",
        "--include-package=creditdesk",
        "--include-data-dir=resources=resources",
        ENTRY_POINT
    ]
    if icon_ico and os.path.exists(icon_ico):
        cmd.append(f"--windows-icon-from-ico={icon_ico}")
    return cmd


def build():
    print(f"Initializing {APP_NAME} Build Sequence (Target: Windows)...")
    cmd = nuitka_command(prepare_icon())

    print("\nExecuting Nuitka Build Command:")
    print(" ".join(cmd))

    if os.name != 'nt':
        print("\n[INFO] You are running on Linux.")
        print("Copy the project to a Windows machine and run: python build.py")
        print("(Requires: pip install .[build])")
        return

    print("\nThis process may take several minutes...")
    try:
        subprocess.check_call(cmd)
    except subprocess.CalledProcessError as e:
        print(f"\nBUILD FAILED with Code {e.returncode}")
        sys.exit(1)

    print("\nBUILD SUCCESSFUL!")
    print(f"Artifacts located in: {os.path.abspath('build/__main__.dist')}")


if __name__ == "__main__":
    build()
