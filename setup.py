from setuptools import setup


def read_file(file):
    with open(file, 'rb') as fh:
        data = fh.read()
    return data.decode('utf-8')

setup(name='shpdecode',
      version='1.0.0',
      description='Pure Python decoder for ESRI Shapefile geometry records',
      long_description=read_file('README.md'),
      long_description_content_type='text/markdown',
      packages=['shpdecode'],
      package_dir={'': 'src'},
      license='MIT',
      zip_safe=False,
      keywords='gis geospatial geographic shapefile shapefiles',
      python_requires='>= 3.9',
      extras_require={'test': ['pytest']},
      classifiers=['Programming Language :: Python',
                   'Programming Language :: Python :: 3',
                   'Topic :: Scientific/Engineering :: GIS',
                   'Topic :: Software Development :: Libraries',
                   'Topic :: Software Development :: Libraries :: Python Modules'])
