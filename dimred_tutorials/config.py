# Configuration constants shared by every tutorial
import os

# ======================= CONFIG =======================
OUTPUT_DIR = os.environ.get("DIMRED_OUTPUT_DIR", "outputs")
DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "data")
MTCARS_CSV = os.path.join(DATA_DIR, "mtcars.csv")
SEED = 123
DPI = 150

# Colours
GRADIENT_COLORS = ["#00AFBB", "#E7B800", "#FC4E07"]   # low -> high contribution
SPECIES_COLORS = ["#1f77b4", "#ff7f0e", "#2ca02c"]    # 3D views
SPECIES_PALETTE = "Set1"                              # 2D views
EXPECTED_LINE_COLOR = "red"

# mtcars column groups
MTCARS_CONTINUOUS = ["mpg", "cyl", "disp", "hp", "drat", "wt", "qsec"]
MTCARS_DISCRETE = ["vs", "am", "gear", "carb"]        # binary / discrete, excluded from PCA by default
MTCARS_MDS = ["mpg", "cyl", "disp", "hp", "drat", "wt", "qsec", "gear", "carb"]

# iris
IRIS_LABEL = "Species"
IRIS_FEATURES = ["Sepal.Length", "Sepal.Width", "Petal.Length", "Petal.Width"]

# PCA
PCA_TOP_CONTRIB = 10

# FAMD
FAMD_COMPONENTS = 5
FAMD_SCREE_YLIM = (0, 60)
FAMD_HABILLAGE = ["Transmission", "Engine_Shape"]
ELLIPSE_LEVEL = 0.95

# MDS
MDS_COMPONENTS = 2
MDS_INIT = "classical_mds"   # start SMACOF from classical scaling
MDS_N_INIT = 1
MDS_NEIGHBOURS = 3

# t-SNE
TSNE_PERPLEXITY = 30      # typical values: 5 to 50
TSNE_THETA = 0.5          # 0 = exact, higher = faster approximation
TSNE_MAX_ITER = 1000
TSNE_PERPLEXITY_SWEEP = [5, 15, 30, 50]
TSNE_SEED_SWEEP = [1, 42, 123, 2024]

# UMAP
UMAP_N_NEIGHBORS = 15
UMAP_MIN_DIST = 0.1
UMAP_NEIGHBORS_GRID = [5, 15, 50]
UMAP_MIN_DIST_GRID = [0.0, 0.1, 0.5]

# Embedding quality (trustworthiness)
TRUST_NEIGHBORS = 10
