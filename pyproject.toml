[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvkit"
version = "0.1.0"
description = "User-space tools, a shell parser and an Sv39 virtual-memory model from a small teaching operating system"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "operating-system",
    "riscv",
    "sv39",
    "page-table",
    "elf",
    "shell",
    "grep",
    "malloc",
    "teaching",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System",
    "Topic :: Education",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-grep = "xvkit.grep:main"
xv-wc = "xvkit.wc:main"
xv-cat = "xvkit.cat:main"
xv-echo = "xvkit.echo:main"
xv-ls = "xvkit.ls:main"
xv-ln = "xvkit.fileops:ln_main"
xv-mkdir = "xvkit.fileops:mkdir_main"
xv-rm = "xvkit.fileops:rm_main"
xv-kill = "xvkit.fileops:kill_main"

[tool.hatch.build.targets.wheel]
packages = ["xvkit"]

[tool.hatch.build.targets.sdist]
include = ["xvkit", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
