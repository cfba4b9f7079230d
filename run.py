# run.py
import os
from veridoc.app import create_app

# Starts the Flask development server without relying on the 'flask run' command.

if __name__ == "__main__":
    os.environ['FLASK_APP'] = 'veridoc.app'
    os.environ.setdefault('FLASK_CONFIG', 'development')

    app = create_app(os.environ['FLASK_CONFIG'])

    print("="*60)
    print(">>> Starting VeriDoc API with the development server...")
    print("="*60)

    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
