from onomatoparty import create_app, db, socketio
import onomatoparty.models  # noqa: F401

app = create_app()

if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'])
