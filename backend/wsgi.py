from topicrank.server import create_app

app, socketio = create_app()
