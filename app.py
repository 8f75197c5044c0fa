from config.config import PORT
from src.sd_clockin.sd_clockin.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=PORT, debug=bool(app.config.get("DEBUG")))
