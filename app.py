from cdindex import create_app

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        # db.create_all() # Uncomment to auto-create tables for dev
        pass
    app.run(debug=True)
