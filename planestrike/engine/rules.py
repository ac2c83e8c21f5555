"""Règles et constantes de Plane Strike.

Ce module expose le contrat minimal partagé par le moteur, la simulation et
l'entraînement:
- dimensions du plateau (`BOARD_HEIGHT`, `BOARD_WIDTH`, `BOARD_SIZE`)
- taille de l'avion (`PLANE_SIZE`)
- hyperparamètres d'entraînement par défaut
"""

# Plateau
BOARD_HEIGHT: int = 6
BOARD_WIDTH: int = 6
BOARD_SIZE: int = BOARD_HEIGHT * BOARD_WIDTH
# En dessous, la forme ne tient pas dans toutes les orientations
MIN_BOARD_DIMENSION: int = 4

# Avion: croix de 5 cases + queue de 3 cases
PLANE_SIZE: int = 8

# Entraînement (valeurs historiques du modèle servi)
ITERATIONS: int = 20000
CHECKPOINT_INTERVAL: int = 100
WINDOW_SIZE: int = 50
LEARNING_RATE: float = 0.005
DISCOUNT_FACTOR: float = 0.5
HIDDEN_SIZES: tuple[int, ...] = (50, 100)

CHECKPOINT_FILE: str = "neuralnet.pt"

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "BOARD_SIZE",
    "MIN_BOARD_DIMENSION",
    "PLANE_SIZE",
    "ITERATIONS",
    "CHECKPOINT_INTERVAL",
    "WINDOW_SIZE",
    "LEARNING_RATE",
    "DISCOUNT_FACTOR",
    "HIDDEN_SIZES",
    "CHECKPOINT_FILE",
]
