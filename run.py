import logging
from tilemath import create_app

logging.basicConfig(
    level=logging.INFO,   # <-- allow INFO and above
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)

app = create_app("tilemath.config.DevelopmentConfig")

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=True)
