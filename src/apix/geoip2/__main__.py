from apix.geoip2.server import main

if __name__ == "__main__":
    main()
