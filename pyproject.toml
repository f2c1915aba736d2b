[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lwlrf"
version = "0.1.0"
description = "Radar FFT to point cloud conversion, CA-CFAR filtering and motion compensation"
requires-python = ">=3.10"
dependencies = []
keywords = ["radar", "point-cloud", "cfar", "fft", "motion-compensation", "deskew"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lwlrf"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
