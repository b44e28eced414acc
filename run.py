import os

from smart_health import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=True, port=int(os.environ.get("PORT", 5000)))
