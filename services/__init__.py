# services/ - Search coordination and filmography building
