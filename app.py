# app.py
from exambooking import create_app

app = create_app()

app.config['PROPAGATE_EXCEPTIONS'] = True

if __name__ == '__main__':
    app.run(debug=True)
