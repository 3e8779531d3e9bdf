# Dimensionality Reduction Tutorials
# PCA, FAMD, MDS, t-SNE and UMAP walkthroughs on mtcars and iris

"""
Tutorial workflows for classical dimensionality-reduction techniques:

- datasets.py: Built-in datasets (mtcars, iris), inspection, selection, scaling, deduplication
- plotting.py: Shared figure helpers (scree, contributions, scatter, ellipses, 3D HTML)
- quality.py: Trustworthiness, continuity and distance rank correlation of an embedding
- pca_numerical.py: PCA on the continuous mtcars variables
- famd_mixed.py: Factor Analysis of Mixed Data on mtcars with categorical factors
- mds.py: Multidimensional Scaling on the numerical mtcars variables
- tsne.py: t-SNE on the deduplicated iris measurements (2D and 3D)
- umap_embedding.py: UMAP on the deduplicated iris measurements (2D and 3D)
- main.py: Orchestration script that runs every tutorial and compares them
"""

__version__ = "1.0.0"
__author__ = "Davide Bittelli"
