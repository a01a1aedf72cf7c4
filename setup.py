#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name="ffdsculpt",
    version="1.0.0",
    description="Interactive free-form deformation (FFD) sculpting of surface meshes",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20.0",
        "scipy>=1.10.0",
        "matplotlib>=3.4.0",
        "pyvista>=0.38.0",
    ],
    extras_require={
        "meshio": ["meshio>=5.0.0"],
        "test": ["pytest>=7.0", "meshio>=5.0.0"],
    },
    entry_points={
        "console_scripts": [
            "ffdsculpt=ffdsculpt.cli.app:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering",
        "Topic :: Multimedia :: Graphics :: 3D Modeling",
    ],
)
