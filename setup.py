# -*- coding: utf-8 -*-
import setuptools
import pathlib
import site
import sys

# odd bug with develop (editable) installs, see: https://github.com/pypa/pip/issues/7953
site.ENABLE_USER_SITE = "--user" in sys.argv[1:]

required = [
    "pyvisa",
    "pyvisa_py",
    "mashumaro",
    "loguru",
    "rich>=13.0.0",
    "click>=8.0.0",
    "click-option-group",
    "tqdm",
]

extras = {
    "test": ["pytest"],
    "dev": ["pytest", "doit", "ruff"],
}

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

# Read version
version = {}
with open("src/dmmlog/_version.py", "r") as f:
    exec(f.read(), version)

if __name__ == "__main__":
    setuptools.setup(
        name="dmmlog",
        version=version["__version__"],
        description="Log readings of a network-attached (LXI/SCPI) multimeter to CSV.",
        long_description=long_description,
        long_description_content_type="text/markdown",
        keywords=[
            "SCPI",
            "LXI",
            "multimeter",
            "DMM",
            "data logging",
        ],
        classifiers=[
            "License :: OSI Approved :: MIT License",
            "Development Status :: 3 - Alpha",
        ],
        license="MIT",
        package_dir={"": "src"},
        packages=setuptools.find_packages(
            where="src",
            exclude=["*.test", "*.test.*", "test.*", "test"],
        ),
        entry_points={
            "console_scripts": [
                "dmmlog=dmmlog.cli:cli",
            ],
        },
        install_requires=required,
        extras_require=extras,
        python_requires=">= 3.11",
        setup_requires=["wheel"],  # force install of wheel first
    )
