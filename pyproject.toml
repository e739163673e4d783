[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "syscleaner"
version = "0.1.0"
description = "System cleaner that removes temporary files, caches and logs to free disk space"
requires-python = ">=3.10"
dependencies = []
keywords = ["cleaner", "disk space", "temp files", "cache", "windows", "maintenance"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: X11 Applications",
    "Environment :: Win32 (MS Windows)",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: Microsoft :: Windows",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
syscleaner = "syscleaner.cli:main"
syscleaner-gui = "syscleaner.gui.clean_panel:main"

[tool.hatch.build.targets.wheel]
packages = ["syscleaner"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
