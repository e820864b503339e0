[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rvsoc"
version = "0.1.0"
description = "Building blocks for a small RV64 system-on-chip model: instruction decoding, memories, ELF loading and guest-side helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["riscv", "rv64", "emulator", "simulator", "soc", "decoder", "elf"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rvsoc-demo = "rvsoc.programs:main"

[tool.hatch.build.targets.wheel]
packages = ["rvsoc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
