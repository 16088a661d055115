from setuptools import find_packages, setup

setup(
    name='bff-evaluator',
    version='0.1.0',
    description='Evaluator for FASTBuild .bff parse trees with source provenance',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'click>=7.0',
        'rich>=9.0'
    ],
    extras_require={
        'test': ['pytest>=7.0'],
    },
    entry_points={
        'console_scripts': [
            'bffeval = bffeval.cli.main:cli'
        ]
    },
    classifiers=[
        'Programming Language :: Python :: 3',
    ],
)
