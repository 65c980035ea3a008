import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="microbialkitchen",
    version="0.1.0",
    description="Unit-aware chemical quantities and chemistry calculations "
                "for microbiology and geochemistry.",
    include_package_data=True,
    install_requires=[
        'numpy', 'scipy', 'pandas>=2.1'
    ],
    extras_require={
        'test': ['pytest'],
    },
    keywords='chemistry units quantities carbonate gas solubility',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=['microbialkitchen',
                                               'microbialkitchen.*']),
    python_requires='>=3.10',
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Chemistry"
    ]
)
