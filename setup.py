from setuptools import setup, find_packages

setup(
    name='vtxntuple',
    version='0.0.1',
    description='Generator-level decay vertices and generator-matched jets for vertexing studies',
    url='',
    author=['Laurits Tani'],
    author_email='laurits.tani@cern.ch',
    license='GPLv3',
    packages=find_packages(),
    package_data={
        'vtxntuple': [
            'config/*',
            'tests/*',
            'scripts/*'
        ]
    },
    install_requires=[
        'awkward',
        'hydra-core',
        'numba',
        'numpy',
        'omegaconf',
        'particle',
        'pyarrow',
        'tqdm',
        'uproot',
        'vector',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
)
