import os

from wool_attendance import create_app

# ---- Flask setup ----
app = create_app()

if __name__ == "__main__":
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 10000)))
