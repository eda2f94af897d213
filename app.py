#runs the dev server. in production point a WSGI server at "microblog:create_app()"
from microblog import create_app

app = create_app()

if __name__ == "__main__":
    app.run(host='0.0.0.0', port=5001, debug=True)
