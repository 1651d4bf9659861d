from setuptools import setup, find_packages

setup(
    name='nvdeploy',
    version='0.1.0',
    packages=find_packages(exclude=['nvdeploy.tests']),
    include_package_data=True,
    install_requires=[
        'typer[all]',
        'kubernetes',
        'python-dotenv',
        'PyYAML',
        'jsonschema',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'nvdeploy=nvdeploy.cli:app'
        ]
    },
    description='Change-driven NeuVector Helm deployment across Kubernetes clusters',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
